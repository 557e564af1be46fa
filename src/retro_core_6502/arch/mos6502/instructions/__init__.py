# src/retro_core_6502/arch/mos6502/instructions/__init__.py
"""
MOS 6502命令セット実装パッケージ。
"""
from .base import (
    AddressingMode, Operand, AccumulatorTarget, MemoryTarget, ExecResult, resolve_operand
)
from .maps import InstructionDescriptor, OPCODE_TABLE, lookup
