# src/mos_machine/arch/mos6502/__init__.py
"""
MOS 6502 Architecture Package
"""
from .machine import Machine
from .registers import Registers
