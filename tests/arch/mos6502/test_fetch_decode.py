# tests/arch/mos6502/test_fetch_decode.py
"""
MOS 6502 フェッチ・デコードとアドレッシングモード解決のテスト。
"""
import pytest
from mos_machine.arch.mos6502.machine import Machine
from mos_machine.arch.mos6502.instructions.base import Address, AddressingMode, Immediate, Implied
from mos_machine.arch.mos6502.instructions.maps import OPCODES, Instruction, lookup_opcode

@pytest.fixture
def machine():
    machine = Machine()
    machine.registers.program_counter = 0x0200
    return machine

def load(machine, address, data):
    machine.memory.set_bytes(address, data)

class TestOpcodeTable:
    def test_table_is_total_over_all_bytes(self):
        assert len(OPCODES) == 256

    def test_documented_opcode_count(self):
        assert sum(1 for entry in OPCODES if entry is not None) == 151

    @pytest.mark.parametrize("opcode, expected", [
        (0x69, (Instruction.ADC, AddressingMode.IMMEDIATE)),
        (0x6D, (Instruction.ADC, AddressingMode.ABSOLUTE)),
        (0xA9, (Instruction.LDA, AddressingMode.IMMEDIATE)),
        (0xB6, (Instruction.LDX, AddressingMode.ZERO_PAGE_Y)),
        (0xBC, (Instruction.LDY, AddressingMode.ABSOLUTE_X)),
        (0xCA, (Instruction.DEX, AddressingMode.IMPLIED)),
        (0xEA, (Instruction.NOP, AddressingMode.IMPLIED)),
        (0x0A, (Instruction.ASL, AddressingMode.ACCUMULATOR)),
        (0x6C, (Instruction.JMP, AddressingMode.INDIRECT)),
    ])
    def test_lookup(self, opcode, expected):
        assert lookup_opcode(opcode) == expected

    @pytest.mark.parametrize("opcode", [0x02, 0x03, 0x1A, 0x80, 0xFF])
    def test_undocumented_opcodes_are_absent(self, opcode):
        assert lookup_opcode(opcode) is None

    def test_table_is_immutable(self):
        with pytest.raises(TypeError):
            OPCODES[0xFF] = (Instruction.NOP, AddressingMode.IMPLIED)

class TestAddressingModes:
    @pytest.mark.parametrize("mode, extra", [
        (AddressingMode.ACCUMULATOR, 0),
        (AddressingMode.IMPLIED, 0),
        (AddressingMode.IMMEDIATE, 1),
        (AddressingMode.ZERO_PAGE, 1),
        (AddressingMode.RELATIVE, 1),
        (AddressingMode.ABSOLUTE, 2),
        (AddressingMode.INDIRECT, 2),
        (AddressingMode.INDEXED_INDIRECT_X, 1),
        (AddressingMode.INDIRECT_INDEXED_Y, 1),
    ])
    def test_extra_bytes(self, mode, extra):
        assert mode.extra_bytes() == extra

    def test_immediate_and_zero_page(self, machine):
        assert AddressingMode.IMMEDIATE.process(machine, [0x80]) == Immediate(0x80)
        assert AddressingMode.ZERO_PAGE.process(machine, [0x10]) == Address(0x10)
        assert AddressingMode.IMPLIED.process(machine, []) == Implied()

    # @intent:test_case インデックスは符号なしとして扱い、ゼロページ内でラップする。
    def test_zero_page_x_wraps_and_uses_unsigned_index(self, machine):
        machine.registers.index_x = -1  # 0xFF
        assert AddressingMode.ZERO_PAGE_X.process(machine, [0x10]) == Address(0x0F)

    def test_absolute_little_endian(self, machine):
        assert AddressingMode.ABSOLUTE.process(machine, [0x34, 0x12]) == Address(0x1234)

    def test_absolute_y_wraps_address_space(self, machine):
        machine.registers.index_y = 0x02
        assert AddressingMode.ABSOLUTE_Y.process(machine, [0xFF, 0xFF]) == Address(0x0001)

    def test_indirect_page_wrap_quirk(self, machine):
        load(machine, 0x02FF, [0x00])
        load(machine, 0x0200, [0x80])
        load(machine, 0x0300, [0x40])
        assert AddressingMode.INDIRECT.process(machine, [0xFF, 0x02]) == Address(0x8000)

    def test_indexed_indirect(self, machine):
        machine.registers.index_x = 4
        load(machine, 0x0024, [0x74, 0x20])
        assert AddressingMode.INDEXED_INDIRECT_X.process(machine, [0x20]) == Address(0x2074)

    def test_indirect_indexed(self, machine):
        machine.registers.index_y = 0x10
        load(machine, 0x0086, [0x28, 0x40])
        assert AddressingMode.INDIRECT_INDEXED_Y.process(machine, [0x86]) == Address(0x4038)

    def test_relative_target_is_next_instruction_plus_offset(self, machine):
        assert AddressingMode.RELATIVE.process(machine, [0x02]) == Address(0x0204)
        assert AddressingMode.RELATIVE.process(machine, [0xFE]) == Address(0x0200)

    # @intent:test_case 解決処理はマシン状態を変更しない。
    def test_process_does_not_mutate_machine(self, machine):
        machine.registers.index_x = 3
        before = machine.registers.copy()
        AddressingMode.INDEXED_INDIRECT_X.process(machine, [0x10])
        assert machine.registers == before
        assert machine.memory.get_and_clear_activity_log() == []

class TestFetchNextAndDecode:
    def test_immediate_instruction_advances_two(self, machine):
        load(machine, 0x0200, [0x69, 0x07])
        decoded = machine.fetch_next_and_decode()
        assert decoded == (Instruction.ADC, Immediate(0x07))
        assert machine.registers.program_counter == 0x0202

    def test_absolute_instruction_advances_three(self, machine):
        load(machine, 0x0200, [0xAD, 0x00, 0x30])
        assert machine.fetch_next_and_decode() == (Instruction.LDA, Address(0x3000))
        assert machine.registers.program_counter == 0x0203

    def test_implied_instruction_advances_one(self, machine):
        load(machine, 0x0200, [0xCA])
        assert machine.fetch_next_and_decode() == (Instruction.DEX, Implied())
        assert machine.registers.program_counter == 0x0201

    # @intent:test_case 未定義オペコードは None（停止シグナル）を返し、PCを進めない。
    def test_undefined_opcode_returns_none(self, machine):
        load(machine, 0x0200, [0xFF])
        assert machine.fetch_next_and_decode() is None
        assert machine.registers.program_counter == 0x0200

    def test_program_counter_wraps(self, machine):
        machine.registers.program_counter = 0xFFFF
        load(machine, 0xFFFF, [0xA9])
        load(machine, 0x0000, [0x42])
        assert machine.fetch_next_and_decode() == (Instruction.LDA, Immediate(0x42))
        assert machine.registers.program_counter == 0x0001

    def test_decode_does_not_execute(self, machine):
        load(machine, 0x0200, [0xA9, 0x42])
        machine.fetch_next_and_decode()
        assert machine.registers.accumulator == 0
