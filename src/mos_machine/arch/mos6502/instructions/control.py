# src/mos_machine/arch/mos6502/instructions/control.py
"""
MOS 6502 制御系命令 (Flags, NOP)。

スタック・割り込み・分岐はこのコアでは扱わない。
それらのオペコードはデコードされた後、ディスパッチャで未実装命令として扱われる。
"""
from typing import TYPE_CHECKING

from mos_machine.core.status import Status, StatusFlag
from mos_machine.arch.mos6502.instructions.base import Operand

if TYPE_CHECKING:
    from mos_machine.arch.mos6502.machine import Machine

# --- Flag Instructions ---

def _set_flag(machine: "Machine", flag: StatusFlag, value: bool) -> None:
    machine.registers.status.set_with_mask(flag, Status(flag if value else 0))

def clc(machine: "Machine", operand: Operand) -> None:
    _set_flag(machine, StatusFlag.CARRY, False)

def sec(machine: "Machine", operand: Operand) -> None:
    _set_flag(machine, StatusFlag.CARRY, True)

def clv(machine: "Machine", operand: Operand) -> None:
    _set_flag(machine, StatusFlag.OVERFLOW, False)

# @intent:note Dフラグは立つが、ADC/SBC は常にバイナリ演算を行う。
def cld(machine: "Machine", operand: Operand) -> None:
    _set_flag(machine, StatusFlag.DECIMAL_MODE, False)

def sed(machine: "Machine", operand: Operand) -> None:
    _set_flag(machine, StatusFlag.DECIMAL_MODE, True)

# --- System ---

def nop(machine: "Machine", operand: Operand) -> None:
    pass
