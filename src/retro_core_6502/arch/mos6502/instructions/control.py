# src/retro_core_6502/arch/mos6502/instructions/control.py
"""
MOS 6502 制御系命令 (Branch, Jump, Stack, Flags, NOP)。

ハンドラは命令の先頭を指すPCを持つ状態で呼び出される。
PCを書き換える命令は jump_to() を返し、エンジンによる命令長分の加算を抑止する。
"""
from typing import Tuple

from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.state import Mos6502CpuState
from retro_core_6502.arch.mos6502.instructions.base import ExecResult, Operand, jump_to
from retro_core_6502.arch.mos6502.instructions.alu import update_nz

STACK_PAGE = 0x0100
IRQ_VECTOR = 0xFFFE

# --- Stack helpers ---
# @intent:note Pushは書き込み後にSPをデクリメント、Pullはインクリメント後に読み出す。SPは8bitでラップする。

def _push(state: Mos6502CpuState, memory: Memory, value: int) -> Mos6502CpuState:
    memory.write(STACK_PAGE | state.sp, value)
    return state.replace(sp=(state.sp - 1) & 0xFF)

def _pull(state: Mos6502CpuState, memory: Memory) -> Tuple[Mos6502CpuState, int]:
    sp = (state.sp + 1) & 0xFF
    return state.replace(sp=sp), memory.read(STACK_PAGE | sp)

def _push_word(state: Mos6502CpuState, memory: Memory, value: int) -> Mos6502CpuState:
    state = _push(state, memory, (value >> 8) & 0xFF)
    return _push(state, memory, value & 0xFF)

def _pull_word(state: Mos6502CpuState, memory: Memory) -> Tuple[Mos6502CpuState, int]:
    state, lo = _pull(state, memory)
    state, hi = _pull(state, memory)
    return state, (hi << 8) | lo

# --- Branch Instructions ---
# @intent:note 各分岐は1つのフラグの値だけを判定し、フラグは一切変更しない。
#              不成立時はPCに触れず、エンジンが命令長(2)分進める。

def _branch(state: Mos6502CpuState, operand: Operand, condition: bool) -> ExecResult:
    if condition:
        return jump_to(state, operand.address)
    return ExecResult(state)

def bcc(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, not state.flag_c)

def bcs(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, state.flag_c)

def beq(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, state.flag_z)

def bne(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, not state.flag_z)

def bmi(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, state.flag_n)

def bpl(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, not state.flag_n)

def bvc(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, not state.flag_v)

def bvs(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return _branch(state, operand, state.flag_v)

# --- Jump Instructions ---

def jmp(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return jump_to(state, operand.address)

# @intent:note スタックに積むのは「JSR命令の最後のバイトのアドレス」(PC + 2)。上位バイトから積む。
def jsr(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    ret_addr = (state.pc + 2) & 0xFFFF
    return jump_to(_push_word(state, memory, ret_addr), operand.address)

# @intent:note 取り出したアドレスはJSRの最後のバイトなので、+1して次の命令へ戻る。
def rts(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    state, ret_addr = _pull_word(state, memory)
    return jump_to(state, ret_addr + 1)

# --- Stack Operations (PHA, PHP, PLA, PLP) ---

def pha(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(_push(state, memory, state.a))

# @intent:note PHPはBとビット5を1にしたステータスを積む。
def php(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(_push(state, memory, state.p | state.B_FLAG | state.R_FLAG))

def pla(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    state, val = _pull(state, memory)
    return ExecResult(update_nz(state.replace(a=val), val))

# @intent:note スタック上のBビットはレジスタに存在しないため無視する。
def plp(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    state, val = _pull(state, memory)
    return ExecResult(state.with_p(val & ~state.B_FLAG))

# --- Flag Operations (CLC, SEC, etc) ---
# @intent:note 名前の付いた1つのフラグだけを変更する。

def clc(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(c=False))

def sec(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(c=True))

def cli(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(i=False))

def sei(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(i=True))

def clv(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(v=False))

def cld(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(d=False))

def sed(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state.update_flags(d=True))

# --- System / Other ---

def nop(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(state)

# @intent:note BRKは1バイト命令だが、パディングバイトを飛ばした PC + 2 を戻りアドレスとして積む。
#              続いてBを立てたステータスを積み、Iを立てて$FFFE/$FFFFのベクタへ飛ぶ。Bはスタック上にのみ現れる。
def brk(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    state = _push_word(state, memory, (state.pc + 2) & 0xFFFF)
    state = _push(state, memory, state.p | state.B_FLAG | state.R_FLAG)
    state = state.update_flags(i=True)

    target = memory.read(IRQ_VECTOR) | (memory.read(IRQ_VECTOR + 1) << 8)
    return jump_to(state, target)

def rti(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    state, p_val = _pull(state, memory)
    state = state.with_p(p_val & ~state.B_FLAG)
    state, ret_addr = _pull_word(state, memory)
    return jump_to(state, ret_addr)
