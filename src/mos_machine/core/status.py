# mos_machine/core/status.py
"""
Core Layer (ステータスレジスタ)

8bit固定幅のフラグ集合を定義します。
フラグの更新は常に (mask, value) のマージとして行い、
マスク外のビットには触れないことを型で保証します。
"""
from dataclasses import dataclass
from enum import IntFlag

# @intent:responsibility ステータスレジスタの各ビットを定義します。
class StatusFlag(IntFlag):
    CARRY = 0x01
    ZERO = 0x02
    IRQ_DISABLE = 0x04
    DECIMAL_MODE = 0x08
    BRK = 0x10
    UNUSED = 0x20
    OVERFLOW = 0x40
    NEGATIVE = 0x80

STATUS_MASK = 0xFF

# @intent:responsibility フラグ集合を保持し、マスク付き置換を提供します。
@dataclass
class Status:
    """
    ステータスレジスタ。

    `set_with_mask(mask, new_status)` は mask で指定したビットだけを new_status から取り込み、
    それ以外のビットは現在の値を保持します。ALUのフラグ更新は全てこの操作を経由します。
    """
    bits: int = 0x00

    def __post_init__(self):
        self.bits = int(self.bits) & STATUS_MASK

    # @intent:responsibility キーワード引数で指定されたフラグだけが立ったStatusを生成します。
    @classmethod
    def new(cls, carry: bool = False, zero: bool = False, irq_disable: bool = False,
            decimal_mode: bool = False, brk: bool = False, unused: bool = False,
            overflow: bool = False, negative: bool = False) -> "Status":
        bits = 0
        if carry: bits |= StatusFlag.CARRY
        if zero: bits |= StatusFlag.ZERO
        if irq_disable: bits |= StatusFlag.IRQ_DISABLE
        if decimal_mode: bits |= StatusFlag.DECIMAL_MODE
        if brk: bits |= StatusFlag.BRK
        if unused: bits |= StatusFlag.UNUSED
        if overflow: bits |= StatusFlag.OVERFLOW
        if negative: bits |= StatusFlag.NEGATIVE
        return cls(bits)

    # @intent:responsibility マスク付き置換。
    # @intent:post-condition maskの外側のビットは呼び出し前と同一。
    def set_with_mask(self, mask: int, new_status: "Status") -> None:
        mask = int(mask) & STATUS_MASK
        self.bits = (self.bits & ~mask) | (new_status.bits & mask)

    def contains(self, flag: StatusFlag) -> bool:
        return (self.bits & flag) == flag

    def insert(self, flag: StatusFlag) -> None:
        self.bits |= int(flag)

    def remove(self, flag: StatusFlag) -> None:
        self.bits &= ~int(flag) & STATUS_MASK

    # @intent:responsibility キャリーフラグを加算用の 0/1 として返します。
    def get_carry(self) -> int:
        return 1 if self.contains(StatusFlag.CARRY) else 0

    def copy(self) -> "Status":
        return Status(self.bits)

    def __str__(self) -> str:
        # NV-BDIZC の順に表示（立っていないビットは '-'）
        letters = "NV-BDIZC"
        return "".join(
            letter if self.bits & (0x80 >> i) else "-"
            for i, letter in enumerate(letters)
        )
