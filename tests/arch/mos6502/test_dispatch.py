# tests/arch/mos6502/test_dispatch.py
"""
MOS 6502 実行ディスパッチャのテスト。
"""
import logging
import unittest

from mos_machine.arch.mos6502.machine import Machine
from mos_machine.arch.mos6502.instructions.base import Address, Immediate, Implied
from mos_machine.arch.mos6502.instructions.maps import Instruction
from mos_machine.core.status import Status, StatusFlag

class TestExecuteInstruction(unittest.TestCase):
    def setUp(self):
        self.machine = Machine()
        self.registers = self.machine.registers

    def test_adc_immediate(self):
        self.machine.execute_instruction((Instruction.ADC, Immediate(0x05)))
        self.assertEqual(self.registers.accumulator, 5)

    # @intent:test_case メモリ上の値は符号付き8bitとして扱われる。
    def test_adc_address_reads_signed_byte(self):
        self.machine.memory.set_byte(0x0040, 0xFF)
        self.machine.load_accumulator(1)
        self.machine.execute_instruction((Instruction.ADC, Address(0x0040)))
        self.assertEqual(self.registers.accumulator, 0)
        self.assertTrue(self.registers.flag_c)
        self.assertTrue(self.registers.flag_z)

    def test_immediate_byte_above_127_is_negative(self):
        self.machine.execute_instruction((Instruction.LDA, Immediate(0x80)))
        self.assertEqual(self.registers.accumulator, -128)
        self.assertTrue(self.registers.flag_n)

    def test_loads_from_address(self):
        self.machine.memory.set_bytes(0x3000, [0x11, 0x00, 0x90])
        self.machine.execute_instruction((Instruction.LDA, Address(0x3000)))
        self.machine.execute_instruction((Instruction.LDX, Address(0x3001)))
        self.machine.execute_instruction((Instruction.LDY, Address(0x3002)))
        self.assertEqual(self.registers.accumulator, 0x11)
        self.assertEqual(self.registers.index_x, 0)
        self.assertEqual(self.registers.index_y, -112)
        self.assertTrue(self.registers.flag_n)
        self.assertFalse(self.registers.flag_z)

    def test_dex_implied(self):
        self.machine.execute_instruction((Instruction.DEX, Implied()))
        self.assertEqual(self.registers.index_x, -1)

    def test_store_writes_unsigned_byte_without_touching_flags(self):
        self.machine.load_accumulator(-2)
        flags_before = self.registers.status.bits
        self.machine.execute_instruction((Instruction.STA, Address(0x0010)))
        self.assertEqual(self.machine.memory.get_byte(0x0010), 0xFE)
        self.assertEqual(self.registers.status.bits, flags_before)

    def test_transfers(self):
        self.machine.load_accumulator(0)
        self.machine.load_x_register(-3)
        self.machine.execute_instruction((Instruction.TXA, Implied()))
        self.assertEqual(self.registers.accumulator, -3)
        self.assertTrue(self.registers.flag_n)
        self.machine.execute_instruction((Instruction.TAY, Implied()))
        self.assertEqual(self.registers.index_y, -3)

    def test_flag_instructions(self):
        self.machine.execute_instruction((Instruction.SEC, Implied()))
        self.assertTrue(self.registers.flag_c)
        self.machine.execute_instruction((Instruction.CLC, Implied()))
        self.assertFalse(self.registers.flag_c)
        self.machine.execute_instruction((Instruction.SED, Implied()))
        self.assertTrue(self.registers.status.contains(StatusFlag.DECIMAL_MODE))
        self.machine.execute_instruction((Instruction.CLD, Implied()))
        self.assertFalse(self.registers.status.contains(StatusFlag.DECIMAL_MODE))
        self.registers.status.insert(StatusFlag.OVERFLOW)
        self.machine.execute_instruction((Instruction.CLV, Implied()))
        self.assertFalse(self.registers.flag_v)

    # @intent:test_case NOP は何度実行しても全レジスタ・全フラグを変えない。
    def test_nop_is_idempotent(self):
        self.registers.accumulator = 12
        self.registers.index_x = -7
        self.registers.index_y = 99
        self.registers.program_counter = 0x1234
        self.registers.status = Status(0xE3)
        before = self.registers.copy()
        for _ in range(10):
            self.machine.execute_instruction((Instruction.NOP, Implied()))
        self.assertEqual(self.machine.registers, before)

    # @intent:test_case 意味論を持たない命令は無操作で、診断ログだけが残る。
    def test_unimplemented_instruction_is_logged_noop(self):
        self.registers.status = Status(0x24)
        before = self.registers.copy()
        with self.assertLogs("mos_machine.arch.mos6502.instructions.maps", level=logging.DEBUG) as cm:
            self.machine.execute_instruction((Instruction.BRK, Implied()))
            self.machine.execute_instruction((Instruction.JMP, Address(0x4000)))
        self.assertEqual(self.machine.registers, before)
        self.assertTrue(any("unimplemented instruction BRK" in line for line in cm.output))
        self.assertTrue(any("unimplemented instruction JMP" in line for line in cm.output))

    # @intent:test_case 既知の命令でも想定外のオペランド種別なら未実装として扱う。
    def test_unexpected_operand_kind_is_noop(self):
        before = self.registers.copy()
        self.machine.execute_instruction((Instruction.DEX, Immediate(1)))
        self.machine.execute_instruction((Instruction.STA, Immediate(1)))
        self.machine.execute_instruction((Instruction.ADC, Implied()))
        self.assertEqual(self.machine.registers, before)

if __name__ == '__main__':
    unittest.main()
