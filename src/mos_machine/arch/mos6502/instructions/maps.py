# src/mos_machine/arch/mos6502/instructions/maps.py
"""
MOS 6502 命令マップと実行ディスパッチ。

OPCODES はオペコード (0x00-0xFF) から (命令, アドレッシングモード) への全域関数で、
未定義オペコードには None が入る。表はインポート時に一度だけ構築され、以後変更されない。
命令の意味は EXECUTORS に (命令, オペランド型) 単位で登録する。
"""
import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple, Type

from mos_machine.arch.mos6502.instructions import alu, control, load
from mos_machine.arch.mos6502.instructions.base import (
    Address, AddressingMode, Immediate, Implied, Operand,
)

if TYPE_CHECKING:
    from mos_machine.arch.mos6502.machine import Machine

logger = logging.getLogger(__name__)

# @intent:responsibility 6502 の全ニーモニック（閉じたタグ集合）。
class Instruction(Enum):
    ADC = "ADC"
    AND = "AND"
    ASL = "ASL"
    BCC = "BCC"
    BCS = "BCS"
    BEQ = "BEQ"
    BIT = "BIT"
    BMI = "BMI"
    BNE = "BNE"
    BPL = "BPL"
    BRK = "BRK"
    BVC = "BVC"
    BVS = "BVS"
    CLC = "CLC"
    CLD = "CLD"
    CLI = "CLI"
    CLV = "CLV"
    CMP = "CMP"
    CPX = "CPX"
    CPY = "CPY"
    DEC = "DEC"
    DEX = "DEX"
    DEY = "DEY"
    EOR = "EOR"
    INC = "INC"
    INX = "INX"
    INY = "INY"
    JMP = "JMP"
    JSR = "JSR"
    LDA = "LDA"
    LDX = "LDX"
    LDY = "LDY"
    LSR = "LSR"
    NOP = "NOP"
    ORA = "ORA"
    PHA = "PHA"
    PHP = "PHP"
    PLA = "PLA"
    PLP = "PLP"
    ROL = "ROL"
    ROR = "ROR"
    RTI = "RTI"
    RTS = "RTS"
    SBC = "SBC"
    SEC = "SEC"
    SED = "SED"
    SEI = "SEI"
    STA = "STA"
    STX = "STX"
    STY = "STY"
    TAX = "TAX"
    TAY = "TAY"
    TSX = "TSX"
    TXA = "TXA"
    TXS = "TXS"
    TYA = "TYA"

# Opcode Entry: (Instruction, Addressing Mode)
OpcodeEntry = Tuple[Instruction, AddressingMode]
DecodedInstruction = Tuple[Instruction, Operand]
# Execution Function Type
ExecFunc = Callable[["Machine", Operand], None]

I = Instruction
ACC = AddressingMode.ACCUMULATOR
IMP = AddressingMode.IMPLIED
IMM = AddressingMode.IMMEDIATE
ZP = AddressingMode.ZERO_PAGE
ZPX = AddressingMode.ZERO_PAGE_X
ZPY = AddressingMode.ZERO_PAGE_Y
REL = AddressingMode.RELATIVE
ABS = AddressingMode.ABSOLUTE
ABX = AddressingMode.ABSOLUTE_X
ABY = AddressingMode.ABSOLUTE_Y
IND = AddressingMode.INDIRECT
IZX = AddressingMode.INDEXED_INDIRECT_X
IZY = AddressingMode.INDIRECT_INDEXED_Y

OPCODE_MAP: Dict[int, OpcodeEntry] = {
    # --- Load/Store/Transfer ---
    0xA9: (I.LDA, IMM), 0xA5: (I.LDA, ZP), 0xB5: (I.LDA, ZPX), 0xAD: (I.LDA, ABS),
    0xBD: (I.LDA, ABX), 0xB9: (I.LDA, ABY), 0xA1: (I.LDA, IZX), 0xB1: (I.LDA, IZY),

    0xA2: (I.LDX, IMM), 0xA6: (I.LDX, ZP), 0xB6: (I.LDX, ZPY), 0xAE: (I.LDX, ABS),
    0xBE: (I.LDX, ABY),

    0xA0: (I.LDY, IMM), 0xA4: (I.LDY, ZP), 0xB4: (I.LDY, ZPX), 0xAC: (I.LDY, ABS),
    0xBC: (I.LDY, ABX),

    0x85: (I.STA, ZP), 0x95: (I.STA, ZPX), 0x8D: (I.STA, ABS), 0x9D: (I.STA, ABX),
    0x99: (I.STA, ABY), 0x81: (I.STA, IZX), 0x91: (I.STA, IZY),

    0x86: (I.STX, ZP), 0x96: (I.STX, ZPY), 0x8E: (I.STX, ABS),
    0x84: (I.STY, ZP), 0x94: (I.STY, ZPX), 0x8C: (I.STY, ABS),

    0xAA: (I.TAX, IMP), 0xA8: (I.TAY, IMP), 0x8A: (I.TXA, IMP), 0x98: (I.TYA, IMP),
    0x9A: (I.TXS, IMP), 0xBA: (I.TSX, IMP),

    # --- ALU Operations ---
    0x69: (I.ADC, IMM), 0x65: (I.ADC, ZP), 0x75: (I.ADC, ZPX), 0x6D: (I.ADC, ABS),
    0x7D: (I.ADC, ABX), 0x79: (I.ADC, ABY), 0x61: (I.ADC, IZX), 0x71: (I.ADC, IZY),

    0xE9: (I.SBC, IMM), 0xE5: (I.SBC, ZP), 0xF5: (I.SBC, ZPX), 0xED: (I.SBC, ABS),
    0xFD: (I.SBC, ABX), 0xF9: (I.SBC, ABY), 0xE1: (I.SBC, IZX), 0xF1: (I.SBC, IZY),

    0xC9: (I.CMP, IMM), 0xC5: (I.CMP, ZP), 0xD5: (I.CMP, ZPX), 0xCD: (I.CMP, ABS),
    0xDD: (I.CMP, ABX), 0xD9: (I.CMP, ABY), 0xC1: (I.CMP, IZX), 0xD1: (I.CMP, IZY),

    0xE0: (I.CPX, IMM), 0xE4: (I.CPX, ZP), 0xEC: (I.CPX, ABS),
    0xC0: (I.CPY, IMM), 0xC4: (I.CPY, ZP), 0xCC: (I.CPY, ABS),

    0x29: (I.AND, IMM), 0x25: (I.AND, ZP), 0x35: (I.AND, ZPX), 0x2D: (I.AND, ABS),
    0x3D: (I.AND, ABX), 0x39: (I.AND, ABY), 0x21: (I.AND, IZX), 0x31: (I.AND, IZY),

    0x09: (I.ORA, IMM), 0x05: (I.ORA, ZP), 0x15: (I.ORA, ZPX), 0x0D: (I.ORA, ABS),
    0x1D: (I.ORA, ABX), 0x19: (I.ORA, ABY), 0x01: (I.ORA, IZX), 0x11: (I.ORA, IZY),

    0x49: (I.EOR, IMM), 0x45: (I.EOR, ZP), 0x55: (I.EOR, ZPX), 0x4D: (I.EOR, ABS),
    0x5D: (I.EOR, ABX), 0x59: (I.EOR, ABY), 0x41: (I.EOR, IZX), 0x51: (I.EOR, IZY),

    0x24: (I.BIT, ZP), 0x2C: (I.BIT, ABS),

    # Shift / Rotate
    0x0A: (I.ASL, ACC), 0x06: (I.ASL, ZP), 0x16: (I.ASL, ZPX), 0x0E: (I.ASL, ABS), 0x1E: (I.ASL, ABX),
    0x4A: (I.LSR, ACC), 0x46: (I.LSR, ZP), 0x56: (I.LSR, ZPX), 0x4E: (I.LSR, ABS), 0x5E: (I.LSR, ABX),
    0x2A: (I.ROL, ACC), 0x26: (I.ROL, ZP), 0x36: (I.ROL, ZPX), 0x2E: (I.ROL, ABS), 0x3E: (I.ROL, ABX),
    0x6A: (I.ROR, ACC), 0x66: (I.ROR, ZP), 0x76: (I.ROR, ZPX), 0x6E: (I.ROR, ABS), 0x7E: (I.ROR, ABX),

    # INC/DEC
    0xE6: (I.INC, ZP), 0xF6: (I.INC, ZPX), 0xEE: (I.INC, ABS), 0xFE: (I.INC, ABX),
    0xC6: (I.DEC, ZP), 0xD6: (I.DEC, ZPX), 0xCE: (I.DEC, ABS), 0xDE: (I.DEC, ABX),

    0xE8: (I.INX, IMP), 0xCA: (I.DEX, IMP), 0xC8: (I.INY, IMP), 0x88: (I.DEY, IMP),

    # --- Control Instructions ---
    0x90: (I.BCC, REL), 0xB0: (I.BCS, REL), 0xF0: (I.BEQ, REL), 0xD0: (I.BNE, REL),
    0x30: (I.BMI, REL), 0x10: (I.BPL, REL), 0x50: (I.BVC, REL), 0x70: (I.BVS, REL),

    0x4C: (I.JMP, ABS), 0x6C: (I.JMP, IND), 0x20: (I.JSR, ABS), 0x60: (I.RTS, IMP),

    0x48: (I.PHA, IMP), 0x08: (I.PHP, IMP), 0x68: (I.PLA, IMP), 0x28: (I.PLP, IMP),

    0x18: (I.CLC, IMP), 0x38: (I.SEC, IMP), 0x58: (I.CLI, IMP), 0x78: (I.SEI, IMP),
    0xB8: (I.CLV, IMP), 0xD8: (I.CLD, IMP), 0xF8: (I.SED, IMP),

    # System
    0xEA: (I.NOP, IMP), 0x00: (I.BRK, IMP), 0x40: (I.RTI, IMP),
}

# @intent:responsibility 256要素の不変ルックアップ表。
OPCODES: Tuple[Optional[OpcodeEntry], ...] = tuple(OPCODE_MAP.get(op) for op in range(0x100))

# @intent:responsibility 命令の意味論。キーにないペアは未実装として扱われる。
EXECUTORS: Dict[Tuple[Instruction, Type], ExecFunc] = {
    (I.ADC, Immediate): alu.adc,
    (I.ADC, Address): alu.adc,
    (I.SBC, Immediate): alu.sbc,
    (I.SBC, Address): alu.sbc,

    (I.LDA, Immediate): load.lda,
    (I.LDA, Address): load.lda,
    (I.LDX, Immediate): load.ldx,
    (I.LDX, Address): load.ldx,
    (I.LDY, Immediate): load.ldy,
    (I.LDY, Address): load.ldy,

    (I.STA, Address): load.sta,
    (I.STX, Address): load.stx,
    (I.STY, Address): load.sty,

    (I.TAX, Implied): load.tax,
    (I.TAY, Implied): load.tay,
    (I.TXA, Implied): load.txa,
    (I.TYA, Implied): load.tya,

    (I.DEX, Implied): alu.dex,
    (I.DEY, Implied): alu.dey,
    (I.INX, Implied): alu.inx,
    (I.INY, Implied): alu.iny,

    (I.CLC, Implied): control.clc,
    (I.SEC, Implied): control.sec,
    (I.CLV, Implied): control.clv,
    (I.CLD, Implied): control.cld,
    (I.SED, Implied): control.sed,

    (I.NOP, Implied): control.nop,
    (I.NOP, Immediate): control.nop,
    (I.NOP, Address): control.nop,
}

# @intent:responsibility オペコードを (命令, アドレッシングモード) に引く。未定義なら None。
def lookup_opcode(opcode: int) -> Optional[OpcodeEntry]:
    return OPCODES[opcode & 0xFF]

# @intent:responsibility デコード済み命令を実行する。全ての入力に対して定義された全域関数。
# @intent:post-condition 未実装の組み合わせは状態を変えず、DEBUGログを残すだけで例外は投げない。
def execute_instruction(machine: "Machine", decoded_instr: DecodedInstruction) -> None:
    instruction, operand = decoded_instr
    executor = EXECUTORS.get((instruction, type(operand)))
    if executor is None:
        logger.debug("attempting to execute unimplemented instruction %s with %s",
                     instruction.value, operand)
        return
    logger.debug("%s %s", instruction.value, operand)
    executor(machine, operand)
