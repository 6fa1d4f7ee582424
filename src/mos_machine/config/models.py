from dataclasses import dataclass, field
from typing import Dict, List

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str  # "RAM", "ROM"
    label: str = ""

@dataclass
class ProgramImage:
    path: str
    address: int = 0x0000  # binイメージの配置先（ihexはレコード内のアドレスを使う）
    format: str = "bin"  # "bin", "ihex"

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    registers: Dict[str, int] = field(default_factory=dict)  # accumulator, index_x, index_y, status

@dataclass
class SystemConfig:
    memory_map: List[MemoryRegion] = field(default_factory=list)
    programs: List[ProgramImage] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
