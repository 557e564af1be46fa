# src/retro_core_6502/arch/mos6502/instructions/maps.py
"""
MOS 6502 命令表。

オペコード(1バイト)をインデックスとする256要素の固定配列で、公式命令151個の記述子を保持する。
プロセス起動時に一度だけ構築され、以後変更されない。
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from retro_core_6502.arch.mos6502.instructions import load, alu, control
from retro_core_6502.arch.mos6502.instructions.base import AddressingMode, ExecFunc

IMP = AddressingMode.IMPLICIT
ACC = AddressingMode.ACCUMULATOR
IMM = AddressingMode.IMMEDIATE
ZP = AddressingMode.ZERO_PAGE
ZPX = AddressingMode.ZERO_PAGE_X
ZPY = AddressingMode.ZERO_PAGE_Y
IZX = AddressingMode.INDEXED_INDIRECT
IZY = AddressingMode.INDIRECT_INDEXED
ABS = AddressingMode.ABSOLUTE
ABX = AddressingMode.ABSOLUTE_X
ABY = AddressingMode.ABSOLUTE_Y
IND = AddressingMode.INDIRECT
REL = AddressingMode.RELATIVE

# @intent:responsibility 命令記述子。構築後は不変。
# length: オペコードを含む命令長 (1-3)
# cycles: 参考値としての基本サイクル数 (ページ境界交差・分岐成立による加算は含まない)
# handler: Noneの場合、実行時にUnimplementedErrorとなる
# reads_operand: Falseの場合、実効アドレスの読み出しを行わない (ストア・ジャンプ系)
@dataclass(frozen=True)
class InstructionDescriptor:
    mnemonic: str
    mode: AddressingMode
    length: int
    cycles: int
    handler: Optional[ExecFunc]
    reads_operand: bool = True

# 実効アドレスの値を必要としない命令
_WRITE_ONLY = {"STA", "STX", "STY", "JMP", "JSR"}

# Opcode Entry: (Mnemonic, Addressing Mode, Execution Function, Base Cycles)
_DEFINITIONS: Dict[int, Tuple[str, AddressingMode, ExecFunc, int]] = {
    # --- Load/Store/Transfer ---
    0xA9: ("LDA", IMM, load.lda, 2),
    0xA5: ("LDA", ZP, load.lda, 3),
    0xB5: ("LDA", ZPX, load.lda, 4),
    0xAD: ("LDA", ABS, load.lda, 4),
    0xBD: ("LDA", ABX, load.lda, 4),
    0xB9: ("LDA", ABY, load.lda, 4),
    0xA1: ("LDA", IZX, load.lda, 6),
    0xB1: ("LDA", IZY, load.lda, 5),

    0xA2: ("LDX", IMM, load.ldx, 2),
    0xA6: ("LDX", ZP, load.ldx, 3),
    0xB6: ("LDX", ZPY, load.ldx, 4),
    0xAE: ("LDX", ABS, load.ldx, 4),
    0xBE: ("LDX", ABY, load.ldx, 4),

    0xA0: ("LDY", IMM, load.ldy, 2),
    0xA4: ("LDY", ZP, load.ldy, 3),
    0xB4: ("LDY", ZPX, load.ldy, 4),
    0xAC: ("LDY", ABS, load.ldy, 4),
    0xBC: ("LDY", ABX, load.ldy, 4),

    0x85: ("STA", ZP, load.sta, 3),
    0x95: ("STA", ZPX, load.sta, 4),
    0x8D: ("STA", ABS, load.sta, 4),
    0x9D: ("STA", ABX, load.sta, 5),
    0x99: ("STA", ABY, load.sta, 5),
    0x81: ("STA", IZX, load.sta, 6),
    0x91: ("STA", IZY, load.sta, 6),

    0x86: ("STX", ZP, load.stx, 3),
    0x96: ("STX", ZPY, load.stx, 4),
    0x8E: ("STX", ABS, load.stx, 4),

    0x84: ("STY", ZP, load.sty, 3),
    0x94: ("STY", ZPX, load.sty, 4),
    0x8C: ("STY", ABS, load.sty, 4),

    0xAA: ("TAX", IMP, load.tax, 2),
    0xA8: ("TAY", IMP, load.tay, 2),
    0x8A: ("TXA", IMP, load.txa, 2),
    0x98: ("TYA", IMP, load.tya, 2),
    0x9A: ("TXS", IMP, load.txs, 2),
    0xBA: ("TSX", IMP, load.tsx, 2),

    # --- ALU Operations ---
    0x69: ("ADC", IMM, alu.adc, 2),
    0x65: ("ADC", ZP, alu.adc, 3),
    0x75: ("ADC", ZPX, alu.adc, 4),
    0x6D: ("ADC", ABS, alu.adc, 4),
    0x7D: ("ADC", ABX, alu.adc, 4),
    0x79: ("ADC", ABY, alu.adc, 4),
    0x61: ("ADC", IZX, alu.adc, 6),
    0x71: ("ADC", IZY, alu.adc, 5),

    0xE9: ("SBC", IMM, alu.sbc, 2),
    0xE5: ("SBC", ZP, alu.sbc, 3),
    0xF5: ("SBC", ZPX, alu.sbc, 4),
    0xED: ("SBC", ABS, alu.sbc, 4),
    0xFD: ("SBC", ABX, alu.sbc, 4),
    0xF9: ("SBC", ABY, alu.sbc, 4),
    0xE1: ("SBC", IZX, alu.sbc, 6),
    0xF1: ("SBC", IZY, alu.sbc, 5),

    0xC9: ("CMP", IMM, alu.cmp, 2),
    0xC5: ("CMP", ZP, alu.cmp, 3),
    0xD5: ("CMP", ZPX, alu.cmp, 4),
    0xCD: ("CMP", ABS, alu.cmp, 4),
    0xDD: ("CMP", ABX, alu.cmp, 4),
    0xD9: ("CMP", ABY, alu.cmp, 4),
    0xC1: ("CMP", IZX, alu.cmp, 6),
    0xD1: ("CMP", IZY, alu.cmp, 5),

    0xE0: ("CPX", IMM, alu.cpx, 2),
    0xE4: ("CPX", ZP, alu.cpx, 3),
    0xEC: ("CPX", ABS, alu.cpx, 4),

    0xC0: ("CPY", IMM, alu.cpy, 2),
    0xC4: ("CPY", ZP, alu.cpy, 3),
    0xCC: ("CPY", ABS, alu.cpy, 4),

    0x29: ("AND", IMM, alu.and_, 2),
    0x25: ("AND", ZP, alu.and_, 3),
    0x35: ("AND", ZPX, alu.and_, 4),
    0x2D: ("AND", ABS, alu.and_, 4),
    0x3D: ("AND", ABX, alu.and_, 4),
    0x39: ("AND", ABY, alu.and_, 4),
    0x21: ("AND", IZX, alu.and_, 6),
    0x31: ("AND", IZY, alu.and_, 5),

    0x09: ("ORA", IMM, alu.ora, 2),
    0x05: ("ORA", ZP, alu.ora, 3),
    0x15: ("ORA", ZPX, alu.ora, 4),
    0x0D: ("ORA", ABS, alu.ora, 4),
    0x1D: ("ORA", ABX, alu.ora, 4),
    0x19: ("ORA", ABY, alu.ora, 4),
    0x01: ("ORA", IZX, alu.ora, 6),
    0x11: ("ORA", IZY, alu.ora, 5),

    0x49: ("EOR", IMM, alu.eor, 2),
    0x45: ("EOR", ZP, alu.eor, 3),
    0x55: ("EOR", ZPX, alu.eor, 4),
    0x4D: ("EOR", ABS, alu.eor, 4),
    0x5D: ("EOR", ABX, alu.eor, 4),
    0x59: ("EOR", ABY, alu.eor, 4),
    0x41: ("EOR", IZX, alu.eor, 6),
    0x51: ("EOR", IZY, alu.eor, 5),

    0x24: ("BIT", ZP, alu.bit, 3),
    0x2C: ("BIT", ABS, alu.bit, 4),

    # Shift / Rotate
    0x0A: ("ASL", ACC, alu.asl, 2),
    0x06: ("ASL", ZP, alu.asl, 5),
    0x16: ("ASL", ZPX, alu.asl, 6),
    0x0E: ("ASL", ABS, alu.asl, 6),
    0x1E: ("ASL", ABX, alu.asl, 7),

    0x4A: ("LSR", ACC, alu.lsr, 2),
    0x46: ("LSR", ZP, alu.lsr, 5),
    0x56: ("LSR", ZPX, alu.lsr, 6),
    0x4E: ("LSR", ABS, alu.lsr, 6),
    0x5E: ("LSR", ABX, alu.lsr, 7),

    0x2A: ("ROL", ACC, alu.rol, 2),
    0x26: ("ROL", ZP, alu.rol, 5),
    0x36: ("ROL", ZPX, alu.rol, 6),
    0x2E: ("ROL", ABS, alu.rol, 6),
    0x3E: ("ROL", ABX, alu.rol, 7),

    0x6A: ("ROR", ACC, alu.ror, 2),
    0x66: ("ROR", ZP, alu.ror, 5),
    0x76: ("ROR", ZPX, alu.ror, 6),
    0x6E: ("ROR", ABS, alu.ror, 6),
    0x7E: ("ROR", ABX, alu.ror, 7),

    # Increment / Decrement
    0xE6: ("INC", ZP, alu.inc, 5),
    0xF6: ("INC", ZPX, alu.inc, 6),
    0xEE: ("INC", ABS, alu.inc, 6),
    0xFE: ("INC", ABX, alu.inc, 7),

    0xC6: ("DEC", ZP, alu.dec, 5),
    0xD6: ("DEC", ZPX, alu.dec, 6),
    0xCE: ("DEC", ABS, alu.dec, 6),
    0xDE: ("DEC", ABX, alu.dec, 7),

    0xE8: ("INX", IMP, alu.inx, 2),
    0xC8: ("INY", IMP, alu.iny, 2),
    0xCA: ("DEX", IMP, alu.dex, 2),
    0x88: ("DEY", IMP, alu.dey, 2),

    # --- Control ---
    0x10: ("BPL", REL, control.bpl, 2),
    0x30: ("BMI", REL, control.bmi, 2),
    0x50: ("BVC", REL, control.bvc, 2),
    0x70: ("BVS", REL, control.bvs, 2),
    0x90: ("BCC", REL, control.bcc, 2),
    0xB0: ("BCS", REL, control.bcs, 2),
    0xD0: ("BNE", REL, control.bne, 2),
    0xF0: ("BEQ", REL, control.beq, 2),

    0x4C: ("JMP", ABS, control.jmp, 3),
    0x6C: ("JMP", IND, control.jmp, 5),
    0x20: ("JSR", ABS, control.jsr, 6),
    0x60: ("RTS", IMP, control.rts, 6),
    0x00: ("BRK", IMP, control.brk, 7),
    0x40: ("RTI", IMP, control.rti, 6),

    0x48: ("PHA", IMP, control.pha, 3),
    0x08: ("PHP", IMP, control.php, 3),
    0x68: ("PLA", IMP, control.pla, 4),
    0x28: ("PLP", IMP, control.plp, 4),

    0x18: ("CLC", IMP, control.clc, 2),
    0x38: ("SEC", IMP, control.sec, 2),
    0x58: ("CLI", IMP, control.cli, 2),
    0x78: ("SEI", IMP, control.sei, 2),
    0xB8: ("CLV", IMP, control.clv, 2),
    0xD8: ("CLD", IMP, control.cld, 2),
    0xF8: ("SED", IMP, control.sed, 2),

    0xEA: ("NOP", IMP, control.nop, 2),
}

OpcodeTable = Tuple[Optional[InstructionDescriptor], ...]

# @intent:responsibility 定義から256要素の固定配列を構築する。未定義のオペコードはNone。
def build_opcode_table(definitions: Dict[int, Tuple[str, AddressingMode, ExecFunc, int]]) -> OpcodeTable:
    table = [None] * 0x100
    for opcode, (mnemonic, mode, handler, cycles) in definitions.items():
        table[opcode] = InstructionDescriptor(
            mnemonic=mnemonic,
            mode=mode,
            length=1 + mode.operand_length,
            cycles=cycles,
            handler=handler,
            reads_operand=mnemonic not in _WRITE_ONLY,
        )
    return tuple(table)

OPCODE_TABLE: OpcodeTable = build_opcode_table(_DEFINITIONS)

# @intent:responsibility オペコードに対応する記述子を返す。未定義ならNone。
def lookup(opcode: int, table: OpcodeTable = OPCODE_TABLE) -> Optional[InstructionDescriptor]:
    return table[opcode & 0xFF]
