# mos_machine/core/machine.py
"""
Core Layer (抽象マシン)

このモジュールは、マシンの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞い（デコード表と実行）はアーキテクチャ層に移譲されます。
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from mos_machine.transport.bus import Bus
from mos_machine.core.snapshot import Snapshot, Operation

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象マシンの基本機能とインターフェースを定義します。
class AbstractMachine(ABC):
    """
    全てのマシンエミュレーションの基底となる抽象クラス。
    レジスタファイルとメモリ（Bus）を排他的に所有し、フェッチ→デコード→PC更新→実行の
    サイクルを駆動します。マシン同士でレジスタやメモリを共有してはいけません。
    """
    # @intent:pre-condition `memory`を渡す場合、他のマシンと共有されていないBusである必要があります。
    def __init__(self, memory: Optional[Bus] = None):
        self.registers = self._create_initial_registers()
        self.memory: Bus = memory if memory is not None else self._create_memory()
        self._step_count: int = 0

    # @intent:responsibility 初期状態（全ゼロ）のレジスタファイルを生成します。
    @abstractmethod
    def _create_initial_registers(self) -> Any:
        pass

    # @intent:responsibility 既定のメモリ（64KiBのゼロクリアRAM）を生成します。
    def _create_memory(self) -> Bus:
        return Bus.with_full_ram()

    # @intent:responsibility マシンを新品の既定インスタンスと同じ状態に置き換えます。
    # @intent:rationale 部分的なリセットは行わない。レジスタもメモリも新しいオブジェクトになる。
    def reset(self) -> None:
        self.registers = self._create_initial_registers()
        self.memory = self._create_memory()
        self._step_count = 0

    @property
    def step_count(self) -> int:
        return self._step_count

    # @intent:responsibility PCの命令をフェッチ・デコードし、PCを命令長だけ進めます。
    # @intent:post-condition 未定義オペコードならNoneを返し、状態は変更しない（停止シグナル）。
    @abstractmethod
    def fetch_next_and_decode(self) -> Optional[Tuple[Any, Any]]:
        pass

    # @intent:responsibility デコード済み命令を実行し、レジスタとメモリを更新します。
    @abstractmethod
    def execute_instruction(self, decoded_instr: Tuple[Any, Any]) -> None:
        pass

    # @intent:responsibility トレース用にデコード済み命令を Operation に変換します。
    @abstractmethod
    def _describe(self, address: int, decoded_instr: Tuple[Any, Any]) -> Operation:
        pass

    # @intent:responsibility レジスタファイルの複製を返します（Snapshot用）。
    @abstractmethod
    def _copy_registers(self) -> Any:
        pass

    # @intent:responsibility 未定義オペコードに到達するまで命令を実行し続けます。
    # @intent:rationale 命令数の上限やタイムアウトは持たない。中断が必要な呼び出し元は step() を使う。
    # @intent:invariant バスのアクセスログは命令ごとに破棄する。ログが必要な呼び出し元は step() を使う。
    def run(self) -> int:
        """
        停止条件（PCの位置に未定義オペコード）に達するまで実行し、実行した命令数を返します。
        """
        executed = 0
        while True:
            decoded_instr = self.fetch_next_and_decode()
            if decoded_instr is None:
                break
            self.execute_instruction(decoded_instr)
            self.memory.get_and_clear_activity_log()
            self._step_count += 1
            executed += 1
        self.memory.get_and_clear_activity_log()
        logger.debug("halted at PC=%#06x after %d instructions", self.registers.program_counter, executed)
        return executed

    # @intent:responsibility 1命令だけ実行し、その結果のスナップショットを返します。
    # @intent:return 停止条件に達していればNone。
    def step(self) -> Optional[Snapshot]:
        """
        1. 前サイクルまでの残存バスログを破棄
        2. フェッチ・デコード（PCは命令長ぶん進む）
        3. 実行前のメモリから Operation を生成
        4. 実行
        5. Snapshot生成
        """
        self.memory.get_and_clear_activity_log()
        initial_pc = self.registers.program_counter

        decoded_instr = self.fetch_next_and_decode()
        if decoded_instr is None:
            return None

        operation = self._describe(initial_pc, decoded_instr)
        self.execute_instruction(decoded_instr)
        self._step_count += 1

        return Snapshot(
            registers=self._copy_registers(),
            operation=operation,
            step_count=self._step_count,
            bus_activity=self.memory.get_and_clear_activity_log(),
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグ（ステータスレジスタ）の各ビットの状態を辞書形式で返す。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
