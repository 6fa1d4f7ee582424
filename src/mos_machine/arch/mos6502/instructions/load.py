# src/mos_machine/arch/mos6502/instructions/load.py
"""
MOS 6502 転送系命令 (Load/Store/Transfer)。
"""
import logging
from typing import TYPE_CHECKING

from mos_machine.common.types import to_signed8, to_unsigned8
from mos_machine.core.status import Status, StatusFlag
from mos_machine.arch.mos6502.registers import Registers
from mos_machine.arch.mos6502.instructions.base import Address, Operand, read_operand

if TYPE_CHECKING:
    from mos_machine.arch.mos6502.machine import Machine

logger = logging.getLogger(__name__)

# @intent:responsibility レジスタへ値をロードし、Z と N だけをマスク付き置換で更新する。
# @intent:post-condition C と V は変化しない。
def load_register_with_flags(registers: Registers, register_name: str, value: int) -> None:
    value = to_signed8(value)
    setattr(registers, register_name, value)

    registers.status.set_with_mask(
        StatusFlag.ZERO | StatusFlag.NEGATIVE,
        Status.new(zero=(value == 0), negative=(value < 0)),
    )

# --- LDA / LDX / LDY ---

def lda(machine: "Machine", operand: Operand) -> None:
    value = read_operand(machine, operand)
    logger.debug("load A: %d", value)
    machine.load_accumulator(value)

def ldx(machine: "Machine", operand: Operand) -> None:
    value = read_operand(machine, operand)
    logger.debug("load X: %d", value)
    machine.load_x_register(value)

def ldy(machine: "Machine", operand: Operand) -> None:
    value = read_operand(machine, operand)
    logger.debug("load Y: %d", value)
    machine.load_y_register(value)

# --- STA / STX / STY ---
# @intent:responsibility レジスタの内容を符号なしバイトとしてメモリへストア。フラグ変化なし。

def sta(machine: "Machine", operand: Address) -> None:
    machine.memory.write(operand.address, to_unsigned8(machine.registers.accumulator))

def stx(machine: "Machine", operand: Address) -> None:
    machine.memory.write(operand.address, to_unsigned8(machine.registers.index_x))

def sty(machine: "Machine", operand: Address) -> None:
    machine.memory.write(operand.address, to_unsigned8(machine.registers.index_y))

# --- Register Transfers (TAX, TAY, TXA, TYA) ---

def tax(machine: "Machine", operand: Operand) -> None:
    machine.load_x_register(machine.registers.accumulator)

def tay(machine: "Machine", operand: Operand) -> None:
    machine.load_y_register(machine.registers.accumulator)

def txa(machine: "Machine", operand: Operand) -> None:
    machine.load_accumulator(machine.registers.index_x)

def tya(machine: "Machine", operand: Operand) -> None:
    machine.load_accumulator(machine.registers.index_y)
