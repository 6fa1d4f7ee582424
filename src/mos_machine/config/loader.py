import os
from typing import Any, Dict

import yaml

from .models import SystemConfig, MemoryRegion, ProgramImage, CpuInitialState

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        config = self._parse_config(data)

        # プログラムイメージの相対パスは設定ファイルの位置を基準に解決する
        base_dir = os.path.dirname(os.path.abspath(path))
        for program in config.programs:
            if not os.path.isabs(program.path):
                program.path = os.path.join(base_dir, program.path)
        return config

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("System config must be a mapping.")

        # Parse Memory Map
        memory_map = []
        for region_data in data.get("memory_map", []):
            memory_map.append(MemoryRegion(
                start=self._parse_int(region_data.get("start")),
                end=self._parse_int(region_data.get("end")),
                type=str(region_data.get("type", "RAM")).upper(),
                label=region_data.get("label", ""),
            ))

        # Parse Program Images
        programs = []
        for program_data in data.get("programs", []):
            if "path" not in program_data:
                raise ValueError(f"Program entry without path: {program_data}")
            programs.append(ProgramImage(
                path=program_data["path"],
                address=self._parse_int(program_data.get("address", 0)),
                format=str(program_data.get("format", "bin")).lower(),
            ))

        # Parse Initial State
        initial_state_data = data.get("initial_state", {})
        registers = {
            name: self._parse_int(value)
            for name, value in initial_state_data.get("registers", {}).items()
        }
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            registers=registers,
        )

        return SystemConfig(
            memory_map=memory_map,
            programs=programs,
            initial_state=initial_state,
        )

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.lower().startswith("0x"):
                return int(text, 16)
            if text.startswith("$"):
                return int(text[1:], 16)
            return int(text)
        raise ValueError(f"Invalid integer format: {value}")
