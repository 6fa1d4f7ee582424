# tests/config/test_system_config.py
"""
YAML システム構成の読み込みと、構成からのマシン組み立てを検証します。
"""
import logging

import pytest

from mos_machine.config.loader import ConfigLoader
from mos_machine.config.builder import SystemBuilder
from mos_machine.config.models import SystemConfig, CpuInitialState, MemoryRegion
from mos_machine.core.status import StatusFlag
from mos_machine.transport.bus import OPEN_BUS_VALUE

CONFIG_YAML = """
memory_map:
  - {start: 0x0000, end: 0x7FFF, type: RAM, label: main}
  - {start: "0xC000", end: "0xFFFF", type: rom, label: firmware}
programs:
  - {path: prog.bin, address: "0xC000"}
initial_state:
  pc: "$C000"
  registers:
    accumulator: 0xFF
    index_x: 5
    status: 0x01
"""

class TestConfigLoader:
    def test_parse_config(self):
        config = ConfigLoader().load_from_string(CONFIG_YAML)

        assert config.memory_map[0] == MemoryRegion(start=0x0000, end=0x7FFF, type="RAM", label="main")
        assert config.memory_map[1].start == 0xC000
        assert config.memory_map[1].type == "ROM"
        assert config.programs[0].address == 0xC000
        assert config.programs[0].format == "bin"
        assert config.initial_state.pc == 0xC000
        assert config.initial_state.registers == {"accumulator": 0xFF, "index_x": 5, "status": 0x01}

    def test_empty_document_gives_defaults(self):
        config = ConfigLoader().load_from_string("")
        assert config == SystemConfig()

    def test_invalid_integer(self):
        with pytest.raises(ValueError, match="Invalid integer format"):
            ConfigLoader().load_from_string("initial_state: {pc: [1, 2]}")

    def test_program_without_path(self):
        with pytest.raises(ValueError, match="Program entry without path"):
            ConfigLoader().load_from_string("programs: [{address: 0}]")

    def test_relative_program_path_is_resolved_from_config_file(self, tmp_path):
        config_file = tmp_path / "system.yaml"
        config_file.write_text(CONFIG_YAML)
        config = ConfigLoader().load_from_file(str(config_file))
        assert config.programs[0].path == str(tmp_path / "prog.bin")

class TestSystemBuilder:
    def test_build_and_run(self, tmp_path):
        (tmp_path / "prog.bin").write_bytes(bytes([
            0x69, 0x01,  # ADC #$01 (A=-1, C=1 -> A=1, C=1)
            0xCA,        # DEX
            0x02,        # 未定義オペコード -> 停止
        ]))
        config_file = tmp_path / "system.yaml"
        config_file.write_text(CONFIG_YAML)

        machine = SystemBuilder().build_system(ConfigLoader().load_from_file(str(config_file)))

        assert machine.registers.accumulator == -1
        assert machine.registers.program_counter == 0xC000

        assert machine.run() == 2
        assert machine.registers.accumulator == 1
        assert machine.registers.status.contains(StatusFlag.CARRY)
        assert machine.registers.index_x == 4

    def test_rom_is_not_writable_by_program(self):
        config = ConfigLoader().load_from_string(CONFIG_YAML.replace("programs:\n  - {path: prog.bin, address: \"0xC000\"}\n", ""))
        machine = SystemBuilder().build_system(config)
        machine.memory.write(0xC000, 0x12)
        assert machine.memory.get_byte(0xC000) == 0x00

    # @intent:test_case 未マップ領域はオープンバス値(未定義オペコード)として読め、実行は停止する。
    def test_unmapped_gap_halts_run(self):
        config = SystemConfig(
            memory_map=[MemoryRegion(0x0000, 0x00FF, "RAM")],
            initial_state=CpuInitialState(pc=0x4000),
        )
        machine = SystemBuilder().build_system(config)
        assert machine.memory.get_byte(0x4000) == OPEN_BUS_VALUE
        assert machine.run() == 0

    def test_default_memory_is_full_ram(self):
        machine = SystemBuilder().build_system(SystemConfig())
        machine.memory.write(0xFFFF, 0x01)
        assert machine.memory.get_byte(0xFFFF) == 0x01

    def test_unknown_device_type_defaults_to_ram(self, caplog):
        config = SystemConfig(memory_map=[MemoryRegion(0x0000, 0xFFFF, "MMIO")])
        with caplog.at_level(logging.WARNING, logger="mos_machine.config.builder"):
            machine = SystemBuilder().build_system(config)
        assert "Unknown device type 'MMIO'" in caplog.text
        machine.memory.write(0x1234, 0x56)
        assert machine.memory.get_byte(0x1234) == 0x56

    def test_unknown_register(self):
        config = SystemConfig(initial_state=CpuInitialState(registers={"stack_pointer": 0xFD}))
        with pytest.raises(ValueError, match="Unknown register"):
            SystemBuilder().build_system(config)

    def test_unsupported_program_format(self, tmp_path):
        config = ConfigLoader().load_from_string(
            f"programs: [{{path: '{tmp_path / 'x.s19'}', format: srec}}]"
        )
        with pytest.raises(ValueError, match="Unsupported program format"):
            SystemBuilder().build_system(config)
