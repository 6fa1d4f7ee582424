# src/mos_machine/arch/mos6502/instructions/base.py
"""
MOS 6502 オペランド型とアドレッシングモード解決ロジック。

アドレッシングモードは「命令に続く何バイトを読むか」と
「そのバイト列をどう解釈して即値／実効アドレスにするか」を決める。
解決処理はマシンの状態（インデックスレジスタやメモリ）を読むが、変更はしない。
"""
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Union

from mos_machine.common.types import ByteSlice, to_signed8, to_unsigned8, wrap_address

if TYPE_CHECKING:
    from mos_machine.arch.mos6502.machine import Machine

# --- Resolved Operands ---

# @intent:responsibility 即値オペランド（符号なし8bit）。
@dataclass(frozen=True)
class Immediate:
    value: int

# @intent:responsibility 実効アドレスオペランド（符号なし16bit）。
@dataclass(frozen=True)
class Address:
    address: int

# @intent:responsibility オペランドなし（Implied / Accumulator）。
@dataclass(frozen=True)
class Implied:
    pass

Operand = Union[Immediate, Address, Implied]

# @intent:responsibility 即値またはメモリ上の値を符号付き8bitとして取り出す。
# @intent:pre-condition operand は Immediate か Address であること。
def read_operand(machine: "Machine", operand: Operand) -> int:
    if isinstance(operand, Immediate):
        return to_signed8(operand.value)
    return to_signed8(machine.memory.get_byte(operand.address))

def _word(lo: int, hi: int) -> int:
    return (hi << 8) | lo

# --- Addressing Modes ---

class AddressingMode(Enum):
    ACCUMULATOR = "accumulator"
    IMPLIED = "implied"
    IMMEDIATE = "immediate"
    ZERO_PAGE = "zero_page"
    ZERO_PAGE_X = "zero_page_x"
    ZERO_PAGE_Y = "zero_page_y"
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    ABSOLUTE_X = "absolute_x"
    ABSOLUTE_Y = "absolute_y"
    INDIRECT = "indirect"
    INDEXED_INDIRECT_X = "indexed_indirect_x"
    INDIRECT_INDEXED_Y = "indirect_indexed_y"

    # @intent:responsibility オペコードに続くオペランドのバイト数を返す。
    def extra_bytes(self) -> int:
        return _EXTRA_BYTES[self]

    # @intent:responsibility オペランドのバイト列を解決済みオペランドへ変換する。
    # @intent:pre-condition machine.registers.program_counter はまだオペコードの位置を指している。
    def process(self, machine: "Machine", arg: ByteSlice) -> Operand:
        return _RESOLVERS[self](machine, arg)

    # @intent:responsibility 逆アセンブル用のオペランド文字列を返す。
    # @intent:note レジスタ値に依存しないよう、生のバイト列だけから組み立てる。
    def format_operand(self, pc: int, arg: ByteSlice) -> str:
        if self is AddressingMode.ACCUMULATOR:
            return "A"
        if self is AddressingMode.IMPLIED:
            return ""
        if self is AddressingMode.IMMEDIATE:
            return f"#${arg[0]:02X}"
        if self is AddressingMode.RELATIVE:
            return f"${_relative_target(pc, arg[0]):04X}"
        if self.extra_bytes() == 2:
            text = f"${_word(arg[0], arg[1]):04X}"
        else:
            text = f"${arg[0]:02X}"
        return _OPERAND_TEMPLATES.get(self, "{}").format(text)

_EXTRA_BYTES: Dict[AddressingMode, int] = {
    AddressingMode.ACCUMULATOR: 0,
    AddressingMode.IMPLIED: 0,
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.ZERO_PAGE: 1,
    AddressingMode.ZERO_PAGE_X: 1,
    AddressingMode.ZERO_PAGE_Y: 1,
    AddressingMode.RELATIVE: 1,
    AddressingMode.ABSOLUTE: 2,
    AddressingMode.ABSOLUTE_X: 2,
    AddressingMode.ABSOLUTE_Y: 2,
    AddressingMode.INDIRECT: 2,
    AddressingMode.INDEXED_INDIRECT_X: 1,
    AddressingMode.INDIRECT_INDEXED_Y: 1,
}

_OPERAND_TEMPLATES: Dict[AddressingMode, str] = {
    AddressingMode.ZERO_PAGE_X: "{},X",
    AddressingMode.ZERO_PAGE_Y: "{},Y",
    AddressingMode.ABSOLUTE_X: "{},X",
    AddressingMode.ABSOLUTE_Y: "{},Y",
    AddressingMode.INDIRECT: "({})",
    AddressingMode.INDEXED_INDIRECT_X: "({},X)",
    AddressingMode.INDIRECT_INDEXED_Y: "({}),Y",
}

# --- Resolvers ---

def _resolve_implied(machine: "Machine", arg: ByteSlice) -> Operand:
    return Implied()

def _resolve_immediate(machine: "Machine", arg: ByteSlice) -> Operand:
    return Immediate(arg[0])

def _resolve_zeropage(machine: "Machine", arg: ByteSlice) -> Operand:
    return Address(arg[0])

# @intent:note ゼロページ内でラップアラウンドする (0xFF + 1 -> 0x00)
def _resolve_zeropage_x(machine: "Machine", arg: ByteSlice) -> Operand:
    return Address((arg[0] + to_unsigned8(machine.registers.index_x)) & 0xFF)

def _resolve_zeropage_y(machine: "Machine", arg: ByteSlice) -> Operand:
    return Address((arg[0] + to_unsigned8(machine.registers.index_y)) & 0xFF)

def _relative_target(pc: int, offset: int) -> int:
    # 分岐先 = 次の命令の先頭 (PC + 2) + 符号付きオフセット
    return wrap_address(pc + 2 + to_signed8(offset))

def _resolve_relative(machine: "Machine", arg: ByteSlice) -> Operand:
    return Address(_relative_target(machine.registers.program_counter, arg[0]))

def _resolve_absolute(machine: "Machine", arg: ByteSlice) -> Operand:
    return Address(_word(arg[0], arg[1]))

def _resolve_absolute_x(machine: "Machine", arg: ByteSlice) -> Operand:
    base_addr = _word(arg[0], arg[1])
    return Address(wrap_address(base_addr + to_unsigned8(machine.registers.index_x)))

def _resolve_absolute_y(machine: "Machine", arg: ByteSlice) -> Operand:
    base_addr = _word(arg[0], arg[1])
    return Address(wrap_address(base_addr + to_unsigned8(machine.registers.index_y)))

# @intent:note JMP ($xxFF) のページ境界バグを再現する: 上位バイトは同じページの $xx00 から読む。
def _resolve_indirect(machine: "Machine", arg: ByteSlice) -> Operand:
    ptr = _word(arg[0], arg[1])
    memory = machine.memory
    eff_lo = memory.peek(ptr)
    if (ptr & 0xFF) == 0xFF:
        eff_hi = memory.peek(ptr & 0xFF00)
    else:
        eff_hi = memory.peek(ptr + 1)
    return Address(_word(eff_lo, eff_hi))

# @intent:note ゼロページ内でXを加算(ラップアラウンド)し、そこにあるポインタを読む。
def _resolve_indexed_indirect(machine: "Machine", arg: ByteSlice) -> Operand:
    ptr_addr = (arg[0] + to_unsigned8(machine.registers.index_x)) & 0xFF
    memory = machine.memory
    lo = memory.peek(ptr_addr)
    hi = memory.peek((ptr_addr + 1) & 0xFF)
    return Address(_word(lo, hi))

# @intent:note ゼロページのポインタを読み、ベースアドレスを得てからYを加算。
def _resolve_indirect_indexed(machine: "Machine", arg: ByteSlice) -> Operand:
    ptr_addr = arg[0]
    memory = machine.memory
    lo = memory.peek(ptr_addr)
    hi = memory.peek((ptr_addr + 1) & 0xFF)
    base_addr = _word(lo, hi)
    return Address(wrap_address(base_addr + to_unsigned8(machine.registers.index_y)))

_RESOLVERS: Dict[AddressingMode, Callable[["Machine", ByteSlice], Operand]] = {
    AddressingMode.ACCUMULATOR: _resolve_implied,
    AddressingMode.IMPLIED: _resolve_implied,
    AddressingMode.IMMEDIATE: _resolve_immediate,
    AddressingMode.ZERO_PAGE: _resolve_zeropage,
    AddressingMode.ZERO_PAGE_X: _resolve_zeropage_x,
    AddressingMode.ZERO_PAGE_Y: _resolve_zeropage_y,
    AddressingMode.RELATIVE: _resolve_relative,
    AddressingMode.ABSOLUTE: _resolve_absolute,
    AddressingMode.ABSOLUTE_X: _resolve_absolute_x,
    AddressingMode.ABSOLUTE_Y: _resolve_absolute_y,
    AddressingMode.INDIRECT: _resolve_indirect,
    AddressingMode.INDEXED_INDIRECT_X: _resolve_indexed_indirect,
    AddressingMode.INDIRECT_INDEXED_Y: _resolve_indirect_indexed,
}
