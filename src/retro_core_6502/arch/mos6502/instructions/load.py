# src/retro_core_6502/arch/mos6502/instructions/load.py
"""
MOS 6502 転送系命令 (Load/Store/Transfer)。
"""
from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.state import Mos6502CpuState
from retro_core_6502.arch.mos6502.instructions.base import ExecResult, Operand
from retro_core_6502.arch.mos6502.instructions.alu import update_nz

# --- LDA / LDX / LDY ---
# @intent:responsibility オペランドをレジスタへロードし、N, Zフラグを更新。

def lda(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    return ExecResult(update_nz(state.replace(a=val), val))

def ldx(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    return ExecResult(update_nz(state.replace(x=val), val))

def ldy(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    return ExecResult(update_nz(state.replace(y=val), val))

# --- STA / STX / STY ---
# @intent:responsibility レジスタの内容を実効アドレスへストア。フラグ変化なし。
# @intent:note ストア命令は実効アドレスを読み出さない（命令表でreads_operand=Falseを指定）。

def sta(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    memory.write(operand.address, state.a)
    return ExecResult(state)

def stx(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    memory.write(operand.address, state.x)
    return ExecResult(state)

def sty(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    memory.write(operand.address, state.y)
    return ExecResult(state)

# --- Register Transfers (TAX, TAY, TXA, TYA, TSX, TXS) ---

def tax(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(update_nz(state.replace(x=state.a), state.a))

def tay(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(update_nz(state.replace(y=state.a), state.a))

def txa(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(update_nz(state.replace(a=state.x), state.x))

def tya(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(update_nz(state.replace(a=state.y), state.y))

# @intent:note TSXはSPからXへ転送。N, Z更新あり。
def tsx(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(update_nz(state.replace(x=state.sp), state.sp))

# @intent:note TXSはXからSPへ転送。N, Zフラグは更新 *されない*。
def txs(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.replace(sp=state.x))
