# src/retro_core_6502/arch/mos6502/instructions/base.py
"""
MOS 6502 アドレッシングモード解決ロジック。

命令の先頭アドレス(PC)とモードから、オペランド値と書き戻し先を求める。
ゼロページ系のインデックス計算は8bit、アブソリュート系は16bitでラップアラウンドする。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional, Tuple, Union

from retro_core_6502.core.errors import EmulationError, UnimplementedError
from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.state import Mos6502CpuState

# @intent:responsibility アドレッシングモードのタグ。値は逆アセンブラ等で使われる略称。
class AddressingMode(Enum):
    IMPLICIT = "IMP"
    IMMEDIATE = "IMM"
    ZERO_PAGE = "ZP"
    ZERO_PAGE_X = "ZPX"
    ZERO_PAGE_Y = "ZPY"
    INDEXED_INDIRECT = "IZX"  # ($xx,X)
    INDIRECT_INDEXED = "IZY"  # ($xx),Y
    ABSOLUTE = "ABS"
    ABSOLUTE_X = "ABX"
    ABSOLUTE_Y = "ABY"
    INDIRECT = "IND"
    RELATIVE = "REL"
    ACCUMULATOR = "ACC"

    # @intent:responsibility オペコードに続くオペランドのバイト数。
    @property
    def operand_length(self) -> int:
        return _OPERAND_LENGTH[self]

_OPERAND_LENGTH = {
    AddressingMode.IMPLICIT: 0,
    AddressingMode.ACCUMULATOR: 0,
    AddressingMode.IMMEDIATE: 1,
    AddressingMode.ZERO_PAGE: 1,
    AddressingMode.ZERO_PAGE_X: 1,
    AddressingMode.ZERO_PAGE_Y: 1,
    AddressingMode.INDEXED_INDIRECT: 1,
    AddressingMode.INDIRECT_INDEXED: 1,
    AddressingMode.RELATIVE: 1,
    AddressingMode.ABSOLUTE: 2,
    AddressingMode.ABSOLUTE_X: 2,
    AddressingMode.ABSOLUTE_Y: 2,
    AddressingMode.INDIRECT: 2,
}

# --- Write-back targets ---
# @intent:data_structure 書き戻し先の直和型: AccumulatorTarget | MemoryTarget | None
# @intent:rationale シフト系命令がモードタグを再解釈せずに書き戻し先を決められるようにする。

@dataclass(frozen=True)
class AccumulatorTarget:
    pass

@dataclass(frozen=True)
class MemoryTarget:
    address: int

WriteTarget = Optional[Union[AccumulatorTarget, MemoryTarget]]

ACCUMULATOR = AccumulatorTarget()

# @intent:responsibility アドレッシングモードの解決結果。
# value: オペランド値 (Implicitの場合、または読み出し不要な命令の場合はNone。Relativeでは変位バイト)
# address: 実効アドレス (Relativeでは分岐先、Indirectではジャンプ先)
# target: 書き戻し先
# text: 逆アセンブリ用のオペランド文字列表現
# operand_bytes: オペランドとしてフェッチされたバイト列
@dataclass(frozen=True)
class Operand:
    mode: AddressingMode
    value: Optional[int] = None
    address: Optional[int] = None
    target: WriteTarget = None
    text: str = ""
    operand_bytes: Tuple[int, ...] = field(default_factory=tuple)

# @intent:responsibility 命令ハンドラの戻り値。
# @intent:rationale pc_redirectedがTrueの場合、エンジンは命令長分のPC加算を行わない。
class ExecResult(NamedTuple):
    state: Mos6502CpuState
    pc_redirected: bool = False

# Execution Function Type
ExecFunc = Callable[[Mos6502CpuState, Memory, Operand], ExecResult]

# @intent:responsibility PCを分岐先に書き換えた結果を返す。
def jump_to(state: Mos6502CpuState, target: int) -> ExecResult:
    return ExecResult(state.replace(pc=target & 0xFFFF), True)

# @intent:responsibility 8bit値を2の補数の符号付き整数として解釈する。
def to_signed(value: int) -> int:
    return value - 0x100 if value & 0x80 else value

# @intent:responsibility オペランドが書き戻し可能な場所へ結果を書き込む。
def write_back(state: Mos6502CpuState, memory: Memory, operand: Operand, value: int) -> Mos6502CpuState:
    target = operand.target
    if isinstance(target, AccumulatorTarget):
        return state.replace(a=value)
    if isinstance(target, MemoryTarget):
        memory.write(target.address, value)
        return state
    raise EmulationError(f"Addressing mode {operand.mode.value} has no write-back target.")

# --- Addressing Modes ---
# 各リゾルバは命令の先頭アドレス(pc)を受け取る。read_valueがFalseの場合、実効アドレスの読み出しを省略する。

Resolver = Callable[[int, Memory, Mos6502CpuState, bool], Operand]

def _memory_operand(mode: AddressingMode, memory: Memory, addr: int, text: str,
                    operand_bytes: Tuple[int, ...], read_value: bool) -> Operand:
    value = memory.read(addr) if read_value else None
    return Operand(mode, value, addr, MemoryTarget(addr), text, operand_bytes)

def _read_word(memory: Memory, pc: int) -> Tuple[int, int, int]:
    lo = memory.read(pc + 1)
    hi = memory.read(pc + 2)
    return (hi << 8) | lo, lo, hi

# @intent:responsibility Implied Mode
def addr_implied(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    return Operand(AddressingMode.IMPLICIT)

# @intent:responsibility Accumulator Mode (A)
# @intent:note メモリアクセスは無く、結果はAへ書き戻される。
def addr_accumulator(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    return Operand(AddressingMode.ACCUMULATOR, state.a, None, ACCUMULATOR, "A")

# @intent:responsibility Immediate Mode (#$xx)
def addr_immediate(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    val = memory.read(pc + 1)
    return Operand(AddressingMode.IMMEDIATE, val, None, None, f"#${val:02X}", (val,))

# @intent:responsibility Zero Page Mode ($xx)
def addr_zeropage(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    addr = memory.read(pc + 1)
    return _memory_operand(AddressingMode.ZERO_PAGE, memory, addr, f"${addr:02X}", (addr,), read_value)

# @intent:responsibility Zero Page, X Mode ($xx,X)
# @intent:note ラップアラウンドあり ($FF + 2 -> $01)
def addr_zeropage_x(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    base = memory.read(pc + 1)
    addr = (base + state.x) & 0xFF
    return _memory_operand(AddressingMode.ZERO_PAGE_X, memory, addr, f"${base:02X},X", (base,), read_value)

# @intent:responsibility Zero Page, Y Mode ($xx,Y) - LDX, STX only
# @intent:note ラップアラウンドあり
def addr_zeropage_y(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    base = memory.read(pc + 1)
    addr = (base + state.y) & 0xFF
    return _memory_operand(AddressingMode.ZERO_PAGE_Y, memory, addr, f"${base:02X},Y", (base,), read_value)

# @intent:responsibility Absolute Mode ($xxxx)
def addr_absolute(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    addr, lo, hi = _read_word(memory, pc)
    return _memory_operand(AddressingMode.ABSOLUTE, memory, addr, f"${addr:04X}", (lo, hi), read_value)

# @intent:responsibility Absolute, X Mode ($xxxx,X)
# @intent:note 16bitでラップアラウンド。ページ境界交差のサイクル加算はモデル化しない。
def addr_absolute_x(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    base_addr, lo, hi = _read_word(memory, pc)
    addr = (base_addr + state.x) & 0xFFFF
    return _memory_operand(AddressingMode.ABSOLUTE_X, memory, addr, f"${base_addr:04X},X", (lo, hi), read_value)

# @intent:responsibility Absolute, Y Mode ($xxxx,Y)
def addr_absolute_y(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    base_addr, lo, hi = _read_word(memory, pc)
    addr = (base_addr + state.y) & 0xFFFF
    return _memory_operand(AddressingMode.ABSOLUTE_Y, memory, addr, f"${base_addr:04X},Y", (lo, hi), read_value)

# @intent:responsibility Indirect Mode (($xxxx)) - JMP only
# @intent:note ページ境界バグを再現する: ポインタが$xxFFの場合、上位バイトは$xx00から読む。
def addr_indirect(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    ptr, ptr_lo, ptr_hi = _read_word(memory, pc)

    eff_lo = memory.read(ptr)
    eff_hi = memory.read((ptr & 0xFF00) | ((ptr + 1) & 0xFF))

    addr = (eff_hi << 8) | eff_lo
    return Operand(AddressingMode.INDIRECT, None, addr, None, f"(${ptr:04X})", (ptr_lo, ptr_hi))

# @intent:responsibility Indexed Indirect Mode (($xx,X)) - "Pre-indexed"
# @intent:note ゼロページ内でXを加算(ラップアラウンド)し、そこにあるポインタを読む。
#              ポインタ上位バイトのアドレスもゼロページ内でラップする。
def addr_indexed_indirect(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    base = memory.read(pc + 1)
    ptr_addr = (base + state.x) & 0xFF

    lo = memory.read(ptr_addr)
    hi = memory.read((ptr_addr + 1) & 0xFF)

    addr = (hi << 8) | lo
    return _memory_operand(AddressingMode.INDEXED_INDIRECT, memory, addr, f"(${base:02X},X)", (base,), read_value)

# @intent:responsibility Indirect Indexed Mode (($xx),Y) - "Post-indexed"
# @intent:note ゼロページのポインタを読み、ベースアドレスを得てからYを16bitで加算。
def addr_indirect_indexed(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    ptr_addr = memory.read(pc + 1)

    lo = memory.read(ptr_addr)
    hi = memory.read((ptr_addr + 1) & 0xFF)
    base_addr = (hi << 8) | lo

    addr = (base_addr + state.y) & 0xFFFF
    return _memory_operand(AddressingMode.INDIRECT_INDEXED, memory, addr, f"(${ptr_addr:02X}),Y", (ptr_addr,), read_value)

# @intent:responsibility Relative Mode (Branch)
# @intent:note valueは変位バイトそのもの、addressは「命令の次のアドレス + 符号付き変位」とする。
def addr_relative(pc: int, memory: Memory, state: Mos6502CpuState, read_value: bool = True) -> Operand:
    offset = memory.read(pc + 1)
    dest_addr = (pc + 2 + to_signed(offset)) & 0xFFFF
    return Operand(AddressingMode.RELATIVE, offset, dest_addr, None, f"${dest_addr:04X}", (offset,))

RESOLVERS: Dict[AddressingMode, Resolver] = {
    AddressingMode.IMPLICIT: addr_implied,
    AddressingMode.ACCUMULATOR: addr_accumulator,
    AddressingMode.IMMEDIATE: addr_immediate,
    AddressingMode.ZERO_PAGE: addr_zeropage,
    AddressingMode.ZERO_PAGE_X: addr_zeropage_x,
    AddressingMode.ZERO_PAGE_Y: addr_zeropage_y,
    AddressingMode.ABSOLUTE: addr_absolute,
    AddressingMode.ABSOLUTE_X: addr_absolute_x,
    AddressingMode.ABSOLUTE_Y: addr_absolute_y,
    AddressingMode.INDIRECT: addr_indirect,
    AddressingMode.INDEXED_INDIRECT: addr_indexed_indirect,
    AddressingMode.INDIRECT_INDEXED: addr_indirect_indexed,
    AddressingMode.RELATIVE: addr_relative,
}

# @intent:responsibility モードに対応するリゾルバでオペランドを解決する。
# @intent:post-condition リゾルバが登録されていないモードはUnimplementedErrorとなる（ゼロを返して誤魔化さない）。
def resolve_operand(mode: AddressingMode, pc: int, memory: Memory, state: Mos6502CpuState,
                    read_value: bool = True) -> Operand:
    resolver = RESOLVERS.get(mode)
    if resolver is None:
        raise UnimplementedError(f"Addressing mode {mode!r} is not implemented.")
    return resolver(pc, memory, state, read_value)
