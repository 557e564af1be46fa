# src/retro_core_6502/arch/mos6502/instructions/alu.py
"""
MOS 6502 算術論理演算命令 (ALU)。
BCDサポートを含む。

各ハンドラは定義上のフラグだけを更新し、それ以外のフラグは引き継ぐ。
"""
from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.state import Mos6502CpuState
from retro_core_6502.arch.mos6502.instructions.base import ExecResult, Operand, write_back

# @intent:responsibility N, Z フラグ更新ヘルパー
def update_nz(state: Mos6502CpuState, value: int) -> Mos6502CpuState:
    return state.update_flags(n=(value & 0x80) != 0, z=(value == 0))

# --- Logical Operations (AND, ORA, EOR, BIT) ---
# @intent:note C, Vは変化しない。

def and_(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = state.a & operand.value
    return ExecResult(update_nz(state.replace(a=res), res))

def ora(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = state.a | operand.value
    return ExecResult(update_nz(state.replace(a=res), res))

def eor(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = state.a ^ operand.value
    return ExecResult(update_nz(state.replace(a=res), res))

# @intent:note BIT命令はメモリの値のビット6, 7をそれぞれV, Nフラグにコピーし、A & Mの結果でZフラグを設定する。
def bit(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    return ExecResult(state.update_flags(
        z=(state.a & val) == 0,
        v=(val & 0x40) != 0,
        n=(val & 0x80) != 0,
    ))

# --- Arithmetic Operations (ADC, SBC) ---

# @intent:responsibility 符号付きオーバーフロー判定。
# @intent:note 加算前のAとオペランドが同符号で、結果の符号がそれと異なる場合にのみ成立する。
def _overflow(a: int, val: int, res: int) -> bool:
    return ((a ^ res) & (val ^ res) & 0x80) != 0

# @intent:responsibility 標準バイナリ加算ロジック
def _adc_binary(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    c = 1 if state.flag_c else 0

    res_wide = a + val + c
    res = res_wide & 0xFF

    new_state = state.replace(a=res)
    return new_state.update_flags(
        c=res_wide > 0xFF,
        z=(res == 0),
        n=(res & 0x80) != 0,
        v=_overflow(a, val, res),
    )

# @intent:responsibility BCD加算ロジック
# @intent:note NMOS 6502の10進モードではN, V, Zの意味が曖昧なため、N, ZはBCD結果から、
#              Vはバイナリ加算と同じ式で求める。Cは10進の桁上がり。
def _adc_bcd(state: Mos6502CpuState, val: int) -> Mos6502CpuState:
    a = state.a
    c = 1 if state.flag_c else 0

    lo = (a & 0x0F) + (val & 0x0F) + c
    hi = (a >> 4) + (val >> 4)

    if lo > 9:
        lo -= 10
        hi += 1

    if hi > 9:
        hi -= 10
        c_out = True
    else:
        c_out = False

    res = ((hi << 4) | (lo & 0x0F)) & 0xFF
    binary = (a + val + c) & 0xFF

    new_state = state.replace(a=res)
    return new_state.update_flags(c=c_out, z=(res == 0), n=(res & 0x80) != 0, v=_overflow(a, val, binary))

def adc(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    if state.flag_d:
        return ExecResult(_adc_bcd(state, operand.value))
    return ExecResult(_adc_binary(state, operand.value))

def _bcd_to_int(b: int) -> int:
    return (b >> 4) * 10 + (b & 0x0F)

def _int_to_bcd(i: int) -> int:
    return ((i // 10) << 4) | (i % 10)

# @intent:note SBCは A - M - (1 - C)。バイナリモードでは ADC (M ^ 0xFF) と等価で、Cは「借りが無い」ことを表す。
def sbc(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value

    if not state.flag_d:
        return ExecResult(_adc_binary(state, val ^ 0xFF))

    a = state.a
    c = 1 if state.flag_c else 0

    diff = _bcd_to_int(a) - _bcd_to_int(val) - (1 - c)
    if diff < 0:
        diff += 100
        c_out = False # Borrow occurred
    else:
        c_out = True

    res = _int_to_bcd(diff % 100)
    binary = (a + (val ^ 0xFF) + c) & 0xFF

    new_state = state.replace(a=res)
    return ExecResult(new_state.update_flags(
        c=c_out, z=(res == 0), n=(res & 0x80) != 0, v=_overflow(a, val ^ 0xFF, binary)
    ))

# --- Compare Operations (CMP, CPX, CPY) ---
# @intent:note 結果を格納しない減算。N, Z, Cを更新する。Cはレジスタ >= 値 (符号なし) の場合に立つ。

def _compare(state: Mos6502CpuState, reg_val: int, mem_val: int) -> Mos6502CpuState:
    res = (reg_val - mem_val) & 0xFF
    return state.update_flags(c=reg_val >= mem_val, z=(res == 0), n=(res & 0x80) != 0)

def cmp(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(_compare(state, state.a, operand.value))

def cpx(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(_compare(state, state.x, operand.value))

def cpy(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    return ExecResult(_compare(state, state.y, operand.value))

# --- Shift / Rotate Operations (ASL, LSR, ROL, ROR) ---
# @intent:note 結果はオペランドの書き戻し先（AccumulatorモードならA、それ以外はメモリ）へ書き込む。

def asl(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    res = (val << 1) & 0xFF
    new_state = state.update_flags(c=(val & 0x80) != 0, z=(res == 0), n=(res & 0x80) != 0)
    return ExecResult(write_back(new_state, memory, operand, res))

def lsr(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    res = val >> 1
    new_state = state.update_flags(c=(val & 0x01) != 0, z=(res == 0), n=False) # N is always 0 for LSR
    return ExecResult(write_back(new_state, memory, operand, res))

def rol(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    old_c = 1 if state.flag_c else 0
    res = ((val << 1) | old_c) & 0xFF
    new_state = state.update_flags(c=(val & 0x80) != 0, z=(res == 0), n=(res & 0x80) != 0)
    return ExecResult(write_back(new_state, memory, operand, res))

def ror(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    val = operand.value
    old_c = 1 if state.flag_c else 0
    res = (val >> 1) | (old_c << 7)
    new_state = state.update_flags(c=(val & 0x01) != 0, z=(res == 0), n=(res & 0x80) != 0)
    return ExecResult(write_back(new_state, memory, operand, res))

# --- Increment / Decrement (INC, DEC, INX, DEX, INY, DEY) ---

def inc(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = (operand.value + 1) & 0xFF
    return ExecResult(update_nz(write_back(state, memory, operand, res), res))

def dec(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = (operand.value - 1) & 0xFF
    return ExecResult(update_nz(write_back(state, memory, operand, res), res))

def inx(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = (state.x + 1) & 0xFF
    return ExecResult(update_nz(state.replace(x=res), res))

def dex(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = (state.x - 1) & 0xFF
    return ExecResult(update_nz(state.replace(x=res), res))

def iny(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = (state.y + 1) & 0xFF
    return ExecResult(update_nz(state.replace(y=res), res))

def dey(state: Mos6502CpuState, memory: Memory, operand: Operand) -> ExecResult:
    res = (state.y - 1) & 0xFF
    return ExecResult(update_nz(state.replace(y=res), res))
