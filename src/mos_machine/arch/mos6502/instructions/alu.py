# src/mos_machine/arch/mos6502/instructions/alu.py
"""
MOS 6502 算術演算命令 (ALU)。

全てバイナリ演算のみ。Dフラグ（10進モード）が立っていてもBCD補正は行わない。
これは既知の簡略化であり、実機との適合性は2進モードの範囲に限られる。
"""
import logging
from typing import TYPE_CHECKING

from mos_machine.common.types import to_signed8, to_unsigned8, wrapping_add8
from mos_machine.core.status import Status, StatusFlag
from mos_machine.arch.mos6502.registers import Registers
from mos_machine.arch.mos6502.instructions.base import Operand, read_operand
from mos_machine.arch.mos6502.instructions.load import load_register_with_flags

if TYPE_CHECKING:
    from mos_machine.arch.mos6502.machine import Machine

logger = logging.getLogger(__name__)

# --- Arithmetic Primitives ---

# @intent:responsibility A + C + value を計算し、C/V をマスク付き置換、A と Z/N をロード経由で更新する。
# @intent:post-condition u8(A') == (u8(A) + C + u8(value)) mod 256
def add_with_carry(registers: Registers, value: int) -> None:
    a_before = registers.accumulator
    c_before = registers.status.get_carry()
    value = to_signed8(value)

    if registers.status.contains(StatusFlag.DECIMAL_MODE):
        logger.debug("decimal mode is not modeled; performing binary addition")

    unsigned_sum = to_unsigned8(a_before) + c_before + to_unsigned8(value)
    a_after = to_signed8(unsigned_sum)

    # @intent:note キャリーは符号なし和が 0xFF を超えたかで判定する。「u8(結果) < u8(A)」とは
    #              A + 0xFF + 1 (結果 == A) や A=5, C=1, value=-1 で結果が異なる。
    did_carry = unsigned_sum > 0xFF
    # 同符号どうしの加算で結果の符号が変わったときだけオーバーフロー
    # @intent:note A=0 も正側に数えるため、A=0, C=1, value=127 でも V が立つ。
    did_overflow = (a_before < 0) == (value < 0) and (a_after < 0) != (a_before < 0)

    registers.status.set_with_mask(
        StatusFlag.CARRY | StatusFlag.OVERFLOW,
        Status.new(carry=did_carry, overflow=did_overflow),
    )

    load_register_with_flags(registers, "accumulator", a_after)

    logger.debug("accumulator: %d", registers.accumulator)

# @intent:responsibility A - value - (1 - C)。2の補数では A + ~value + C と等価。
def subtract_with_carry(registers: Registers, value: int) -> None:
    add_with_carry(registers, ~to_signed8(value))

# @intent:responsibility レジスタに delta を加算（8bitラップアラウンド）し、Z/N を更新する。
def step_register(registers: Registers, register_name: str, delta: int) -> None:
    value = getattr(registers, register_name)
    load_register_with_flags(registers, register_name, wrapping_add8(value, delta))

# --- Instruction Handlers ---

def adc(machine: "Machine", operand: Operand) -> None:
    value = read_operand(machine, operand)
    logger.debug("add with carry: %s value: %d", operand, value)
    machine.add_with_carry(value)

def sbc(machine: "Machine", operand: Operand) -> None:
    value = read_operand(machine, operand)
    logger.debug("subtract with carry: %s value: %d", operand, value)
    subtract_with_carry(machine.registers, value)

def dex(machine: "Machine", operand: Operand) -> None:
    machine.dec_x()

def dey(machine: "Machine", operand: Operand) -> None:
    step_register(machine.registers, "index_y", -1)

def inx(machine: "Machine", operand: Operand) -> None:
    step_register(machine.registers, "index_x", 1)

def iny(machine: "Machine", operand: Operand) -> None:
    step_register(machine.registers, "index_y", 1)
