# src/mos_machine/arch/mos6502/registers.py
"""
MOS 6502 レジスタファイルの定義。
"""
from dataclasses import dataclass, field

from mos_machine.common.types import wrap_address
from mos_machine.core.status import Status, StatusFlag

# @intent:responsibility MOS 6502 のレジスタ（A, X, Y, PC, P）を保持する。
@dataclass
class Registers:
    """
    MOS 6502 のレジスタ状態。

    A, X, Y は符号付き8bit値 (-128..127) として保持する。
    メモリへ書き出すときは符号なしバイトへ再解釈する。
    """
    accumulator: int = 0
    index_x: int = 0
    index_y: int = 0
    program_counter: int = 0x0000
    status: Status = field(default_factory=Status)

    # @intent:responsibility PCに符号付きのバイト数差分を加算する（16bitラップアラウンド）。
    def advance_pc(self, diff: int) -> None:
        self.program_counter = wrap_address(self.program_counter + diff)

    # @intent:responsibility 独立したコピーを返す。Statusも複製する。
    def copy(self) -> "Registers":
        return Registers(
            accumulator=self.accumulator,
            index_x=self.index_x,
            index_y=self.index_y,
            program_counter=self.program_counter,
            status=self.status.copy(),
        )

    # @intent:responsibility フラグの状態を取得するヘルパープロパティ。
    @property
    def flag_c(self) -> bool: return self.status.contains(StatusFlag.CARRY)
    @property
    def flag_z(self) -> bool: return self.status.contains(StatusFlag.ZERO)
    @property
    def flag_v(self) -> bool: return self.status.contains(StatusFlag.OVERFLOW)
    @property
    def flag_n(self) -> bool: return self.status.contains(StatusFlag.NEGATIVE)
