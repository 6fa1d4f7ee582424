"""
共通の型定義と数値ヘルパーを提供するモジュール。
プロジェクト全体で使用される型エイリアスと、8bit/16bitの2の補数演算を定義します。
"""
from typing import List

# @intent:data_structure メモリから読み出したバイト列（各要素は0..255）。
ByteSlice = List[int]

BYTE_MASK = 0xFF
ADDRESS_MASK = 0xFFFF

# @intent:responsibility 任意の整数を符号なし8bit値に正規化します。
# @intent:rationale Pythonの整数は任意精度のため、2の補数表現はmod 256で明示的に作る。
def to_unsigned8(value: int) -> int:
    return value & BYTE_MASK

# @intent:responsibility 任意の整数を符号付き8bit値 (-128..127) として再解釈します。
def to_signed8(value: int) -> int:
    value &= BYTE_MASK
    return value - 0x100 if value & 0x80 else value

# @intent:responsibility 8bitラップアラウンド付きの符号付き加算。
def wrapping_add8(*values: int) -> int:
    return to_signed8(sum(values))

# @intent:responsibility 16bitアドレス空間でのラップアラウンド。
def wrap_address(address: int) -> int:
    return address & ADDRESS_MASK
