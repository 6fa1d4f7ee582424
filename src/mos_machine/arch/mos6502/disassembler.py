# src/mos_machine/arch/mos6502/disassembler.py
"""
MOS 6502 逆アセンブラ。
"""
from typing import List, Tuple

from mos_machine.common.types import wrap_address
from mos_machine.transport.bus import Bus
from mos_machine.arch.mos6502.instructions.maps import lookup_opcode

# @intent:responsibility 1命令を逆アセンブルし、(命令長, HEX, ニーモニック) を返す。
# @intent:note バスアクセスログを汚さないよう peek のみを使う。
def disassemble_one(bus: Bus, address: int) -> Tuple[int, str, str]:
    address = wrap_address(address)
    opcode = bus.peek(address)
    entry = lookup_opcode(opcode)

    if entry is None:
        return 1, f"{opcode:02X}", f"DB ${opcode:02X}"

    instruction, mode = entry
    arg = [bus.peek(address + 1 + i) for i in range(mode.extra_bytes())]
    hex_str = " ".join(f"{b:02X}" for b in [opcode] + arg)
    text = f"{instruction.value} {mode.format_operand(address, arg)}".strip()
    return 1 + len(arg), hex_str, text

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルする。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    メモリを解析し、(アドレス, HEX, ニーモニック) のリストを返す。
    レジスタ状態に依存しないため、インデックス付きアドレスは解決せずに表示する。
    """
    results = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        addr = wrap_address(current_addr)
        instr_len, hex_str, text = disassemble_one(bus, addr)
        results.append((addr, hex_str, text))
        current_addr += instr_len

    return results
