# mos_machine/loader/loader.py
"""
プログラムイメージローダーモジュール。
生バイナリおよび Intel HEX 形式のロードをサポートします。
ロードは Bus.set_byte 経由で行うため、ROM領域にも配置できます。
"""
import logging

from mos_machine.transport.bus import Bus

logger = logging.getLogger(__name__)

class BinaryLoader:
    """
    生のバイナリファイルを指定アドレスから連続して配置するローダー。
    """
    def load_binary(self, file_path: str, bus: Bus, address: int) -> int:
        with open(file_path, 'rb') as f:
            data = f.read()
        if address + len(data) > 0x10000:
            raise ValueError(
                f"Binary image of {len(data)} bytes does not fit at {address:#06x}."
            )
        bus.set_bytes(address, data)
        logger.debug("loaded %d bytes from %s at %#06x", len(data), file_path, address)
        return len(data)

class IntelHexLoader:
    """
    Intel HEX形式のファイルを解析し、データをバスにロードするローダー。
    """
    def load_intel_hex(self, file_path: str, bus: Bus) -> int:
        base_address = 0x0000
        loaded = 0

        with open(file_path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line or not line.startswith(':'):
                    continue

                comment_start = line.find(';')
                if comment_start != -1:
                    line = line[:comment_start].strip()

                if len(line) < 11:
                    raise ValueError(f"Invalid Intel HEX record format on line {line_num}: Too short - {line}")

                try:
                    data_length = int(line[1:3], 16)
                    address_field = int(line[3:7], 16)
                    record_type = int(line[7:9], 16)
                    data_part_str = line[9:-2]
                    checksum_field = int(line[-2:], 16)
                    data = bytes.fromhex(data_part_str)
                except ValueError as e:
                    raise ValueError(f"Error parsing Intel HEX line {line_num}: {line} - {e}") from e

                if len(data) != data_length:
                    raise ValueError(f"Data length mismatch on line {line_num}")

                checksum_sum = data_length + (address_field >> 8) + (address_field & 0xFF) + record_type + sum(data)
                calculated_checksum = (-checksum_sum) & 0xFF
                if calculated_checksum != checksum_field:
                    raise ValueError(f"Checksum mismatch on line {line_num}: Calculated {calculated_checksum:02X}, Expected {checksum_field:02X}")

                if record_type == 0x00:
                    load_address = base_address + address_field
                    if load_address + data_length > 0x10000:
                        raise ValueError(f"Record on line {line_num} exceeds the 64KiB address space")
                    bus.set_bytes(load_address, data)
                    loaded += data_length
                elif record_type == 0x01:
                    break
                elif record_type == 0x02:
                    base_address = int.from_bytes(data, "big") << 4
                elif record_type == 0x04:
                    base_address = int.from_bytes(data, "big") << 16
                elif record_type in (0x03, 0x05):
                    # 開始アドレスレコードは無視（PCは設定ファイルで指定する）
                    pass
                else:
                    raise ValueError(f"Unknown Intel HEX record type {record_type:02X} on line {line_num}")

        logger.debug("loaded %d bytes from %s", loaded, file_path)
        return loaded
