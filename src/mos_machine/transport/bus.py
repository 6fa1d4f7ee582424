# mos_machine/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、64KiBのメモリアドレス空間を抽象化し、
読み書きアクセスを適切なデバイスに委譲する責務を負います。
CPUコアから見たメモリは全域で定義された（例外を投げない）関数として振る舞います。
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from mos_machine.common.types import ByteSlice, wrap_address

logger = logging.getLogger(__name__)

# マップされていないアドレスを読んだときの値（オープンバス）。
# 0xFF は未定義オペコードなので、PCが未マップ領域に入ると実行ループは停止する。
OPEN_BUS_VALUE = 0xFF

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

@dataclass(frozen=True)
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 8bit value
    access_type: BusAccessType

class Device(ABC):
    """
    バスに接続されるデバイスの抽象基底クラス。
    アドレスはデバイス内でのオフセットとして扱われます。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

# @intent:responsibility 基本的なRAMデバイスの機能を提供します。
class RAM(Device):
    """
    ゼロクリアされた読み書き可能メモリ。
    """
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for {type(self).__name__} of size {self._size}.")
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for {type(self).__name__} of size {self._size}.")
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

class ROM(RAM):
    """
    読み込み専用メモリデバイス。
    CPUからの書き込みは無視されます。内容の初期化は load_data で行います。
    """
    # CPUからの書き込みは内容を変えない。
    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for ROM of size {self._size}.")
        logger.debug("ignored write of $%02X to ROM offset $%04X", data, address)

    # @intent:responsibility ROMの内容を初期化するためのバックドアメソッドです。
    def load_data(self, address: int, data: int) -> None:
        super().write(address, data)

# @intent:responsibility read/write はアクセスログに記録され、step() ごとに Snapshot へ渡されます。
class Bus:
    """
    デバイスのアドレス範囲を束ね、16bitアドレスをデバイス内オフセットへ振り分けます。

    CPUコア向けのインターフェース (get_byte / get_slice) はアドレスを16bitで
    ラップし、未マップ領域では OPEN_BUS_VALUE を返すため、決して例外を投げません。
    """
    def __init__(self):
        # メモリマップ: (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []

    # @intent:responsibility 64KiB全域をRAMで埋めたバスを生成します。
    @classmethod
    def with_full_ram(cls) -> "Bus":
        bus = cls()
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        return bus

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレス範囲にデバイスを登録します。
    # @intent:pre-condition 0 <= start_address <= end_address <= 0xFFFF。
    # @intent:rationale アドレス範囲の重複チェックは行いません。先に登録されたデバイスが優先されます。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if not (0 <= start_address <= end_address <= 0xFFFF):
            raise ValueError("Invalid address range: start_address must be <= end_address and within 0x0000-0xFFFF.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        if isinstance(device, RAM):
            expected_size = end_address - start_address + 1
            if device.get_size() != expected_size:
                raise ValueError(
                    f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                    f"the specified address range size ({expected_size} bytes)."
                )

        self._memory_map.append((start_address, end_address, device))

    # @intent:post-condition デバイスが見つからなかった場合はNoneを返します。
    def _find_device(self, address: int) -> Optional[Tuple[Device, int]]:
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        return None

    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します（ログ記録あり）。
    def read(self, address: int) -> int:
        address = wrap_address(address)
        data = self.peek(address)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        address = wrap_address(address)
        found = self._find_device(address)
        if found is None:
            return OPEN_BUS_VALUE
        device, offset = found
        return device.read(offset)

    # @intent:responsibility CPUからの書き込み。ROMへの書き込みはデバイス側で無視されます。
    def write(self, address: int, data: int) -> None:
        address = wrap_address(address)
        found = self._find_device(address)
        if found is None:
            logger.warning("write of $%02X to unmapped address %#06x dropped", data, address)
        else:
            device, offset = found
            device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE)

    # --- CPUコア向けインターフェース ---

    def get_byte(self, address: int) -> int:
        return self.read(address)

    # @intent:responsibility 連続したlengthバイトを読み出します。末尾は$FFFFから$0000へラップします。
    def get_slice(self, address: int, length: int) -> ByteSlice:
        return [self.read(address + i) for i in range(length)]

    # --- ローダー向けインターフェース ---

    # @intent:responsibility プログラムイメージ配置用の書き込み。ROMにも書き込め、アクセスログには残りません。
    def set_byte(self, address: int, data: int) -> None:
        address = wrap_address(address)
        found = self._find_device(address)
        if found is None:
            logger.warning("load of $%02X to unmapped address %#06x dropped", data, address)
            return
        device, offset = found
        if isinstance(device, ROM):
            device.load_data(offset, data)
        else:
            device.write(offset, data)

    def set_bytes(self, address: int, data: Iterable[int]) -> None:
        for i, byte in enumerate(data):
            self.set_byte(address + i, byte)
