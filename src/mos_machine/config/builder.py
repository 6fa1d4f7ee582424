import logging

from mos_machine.common.types import to_signed8, wrap_address
from mos_machine.core.status import Status
from mos_machine.transport.bus import Bus, RAM, ROM
from mos_machine.arch.mos6502.machine import Machine
from mos_machine.loader.loader import BinaryLoader, IntelHexLoader
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

_SIGNED_REGISTERS = ("accumulator", "index_x", "index_y")

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、Machineを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Machine:
        bus = self.build_bus(config)
        machine = Machine(bus)

        for program in config.programs:
            if program.format == "bin":
                BinaryLoader().load_binary(program.path, bus, program.address)
            elif program.format == "ihex":
                IntelHexLoader().load_intel_hex(program.path, bus)
            else:
                raise ValueError(f"Unsupported program format: {program.format}")

        self.apply_initial_state(machine, config.initial_state)
        return machine

    def build_bus(self, config: SystemConfig) -> Bus:
        if not config.memory_map:
            return Bus.with_full_ram()

        bus = Bus()
        for region in config.memory_map:
            size = region.end - region.start + 1

            if region.type == "RAM":
                device = RAM(size)
            elif region.type == "ROM":
                device = ROM(size)
            else:
                logger.warning(
                    "Unknown device type '%s' for range %04X-%04X, defaulting to RAM",
                    region.type, region.start, region.end,
                )
                device = RAM(size)

            bus.register_device(region.start, region.end, device)
        return bus

    # @intent:responsibility Configで定義された初期状態をマシンに適用します。
    # @intent:rationale A/X/Y は符号付き8bitで保持するため、設定値（0..255 も可）を再解釈して格納します。
    def apply_initial_state(self, machine: Machine, config_state: CpuInitialState) -> None:
        registers = machine.registers
        registers.program_counter = wrap_address(config_state.pc)

        for reg_name, value in config_state.registers.items():
            if reg_name in _SIGNED_REGISTERS:
                setattr(registers, reg_name, to_signed8(value))
            elif reg_name == "status":
                registers.status = Status(value)
            else:
                raise ValueError(f"Unknown register in initial_state: {reg_name}")
