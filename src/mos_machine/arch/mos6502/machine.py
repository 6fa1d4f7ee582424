# src/mos_machine/arch/mos6502/machine.py
"""
MOS 6502 マシンエミュレーションの中心モジュール。

フェッチ・デコード (fetch_next_and_decode)、実行 (execute_instruction)、
およびALUプリミティブ（単体テストから直接呼べる公開メソッド）を提供する。
"""
from typing import Dict, List, Optional, Tuple

from mos_machine.common.types import wrap_address
from mos_machine.core.machine import AbstractMachine
from mos_machine.core.snapshot import Operation
from mos_machine.core.status import StatusFlag
from mos_machine.arch.mos6502 import disassembler
from mos_machine.arch.mos6502.registers import Registers
from mos_machine.arch.mos6502.instructions import alu, load, maps
from mos_machine.arch.mos6502.instructions.maps import DecodedInstruction, lookup_opcode

# @intent:responsibility MOS 6502 の具体的なエミュレーションロジックを提供する。
class Machine(AbstractMachine):
    """
    MOS 6502 をエミュレートするクラス。

    生成直後は全レジスタがゼロ、メモリは64KiBのゼロクリアRAM。
    reset() は新しい既定インスタンスへの完全な置き換えとして振る舞う。
    """

    def _create_initial_registers(self) -> Registers:
        return Registers()

    def _copy_registers(self) -> Registers:
        return self.registers.copy()

    # @intent:responsibility PC位置のオペコードを引き、オペランドを解決し、PCを命令長だけ進める。
    # @intent:rationale オペランドのスライスを読んでから PC を進め、その後に実行する。
    #                  将来の分岐命令は「進めた後のPC」を基準にできる。
    def fetch_next_and_decode(self) -> Optional[DecodedInstruction]:
        pc = self.registers.program_counter
        opcode = self.memory.get_byte(pc)

        entry = lookup_opcode(opcode)
        if entry is None:
            return None

        instruction, mode = entry
        extra_bytes = mode.extra_bytes()
        num_bytes = 1 + extra_bytes

        data_start = wrap_address(pc + 1)
        arg = self.memory.get_slice(data_start, extra_bytes)
        operand = mode.process(self, arg)

        self.registers.advance_pc(num_bytes)

        return instruction, operand

    def execute_instruction(self, decoded_instr: DecodedInstruction) -> None:
        maps.execute_instruction(self, decoded_instr)

    # --- ALU / Load Primitives ---

    def load_accumulator(self, value: int) -> None:
        load.load_register_with_flags(self.registers, "accumulator", value)

    def load_x_register(self, value: int) -> None:
        load.load_register_with_flags(self.registers, "index_x", value)

    def load_y_register(self, value: int) -> None:
        load.load_register_with_flags(self.registers, "index_y", value)

    # TODO: binary-coded decimal (Dフラグ) の加算を実装する
    def add_with_carry(self, value: int) -> None:
        alu.add_with_carry(self.registers, value)

    def dec_x(self) -> None:
        alu.step_register(self.registers, "index_x", -1)

    # --- Diagnostics ---

    def _describe(self, address: int, decoded_instr: DecodedInstruction) -> Operation:
        length, hex_str, text = disassembler.disassemble_one(self.memory, address)
        mnemonic, _, operand = text.partition(" ")
        return Operation(
            address=address,
            opcode_hex=hex_str.split(" ")[0],
            mnemonic=mnemonic,
            operand=operand,
            length=length,
        )

    # @intent:responsibility レジスタマップ（表示用）を返す。
    def get_register_map(self) -> Dict[str, int]:
        registers = self.registers
        return {
            "A": registers.accumulator,
            "X": registers.index_x,
            "Y": registers.index_y,
            "PC": registers.program_counter,
            "P": registers.status.bits,
        }

    # @intent:responsibility フラグ状態（表示用）を返す。
    def get_flag_state(self) -> Dict[str, bool]:
        status = self.registers.status
        return {
            "N": status.contains(StatusFlag.NEGATIVE),
            "V": status.contains(StatusFlag.OVERFLOW),
            "B": status.contains(StatusFlag.BRK),
            "D": status.contains(StatusFlag.DECIMAL_MODE),
            "I": status.contains(StatusFlag.IRQ_DISABLE),
            "Z": status.contains(StatusFlag.ZERO),
            "C": status.contains(StatusFlag.CARRY),
        }

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self.memory, start_addr, length)

    def __str__(self) -> str:
        registers = self.registers
        return (
            f"Machine Dump:\n\n"
            f"Accumulator: {registers.accumulator}\n"
            f"X: {registers.index_x}\n"
            f"Y: {registers.index_y}\n"
            f"PC: ${registers.program_counter:04X}\n"
            f"Status: {registers.status}"
        )
