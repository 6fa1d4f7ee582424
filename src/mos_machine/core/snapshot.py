# mos_machine/core/snapshot.py
"""
実行状態の不変スナップショット

1命令ぶんの実行結果（実行後のレジスタ、実行した命令、バスアクセス）を記録する
不変のデータ構造を定義します。step() の戻り値としてトレース用途に用います。
"""
from dataclasses import dataclass, field
from typing import Any, List

from mos_machine.transport.bus import BusAccess

# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    実行された命令の詳細（アドレス、HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    address: int # 命令の先頭アドレス
    opcode_hex: str # 例: "69"
    mnemonic: str # 例: "ADC"
    operand: str = "" # 例: "#$01"
    length: int = 1 # 命令のバイト長

    def __str__(self) -> str:
        return f"{self.mnemonic} {self.operand}".strip()

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    1命令実行後のレジスタ状態（コピー）と、その命令が発生させたバスアクセスを保持します。
    """
    registers: Any
    operation: Operation
    step_count: int
    bus_activity: List[BusAccess] = field(default_factory=list)

    # @intent:rationale registersは生成側でコピーを渡すこと。後続の命令実行で書き換わらないようにするため。
