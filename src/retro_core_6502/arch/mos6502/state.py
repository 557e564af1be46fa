# src/retro_core_6502/arch/mos6502/state.py
"""
MOS 6502 CPUの状態定義。
"""
from dataclasses import dataclass, replace
from retro_core_6502.core.state import CpuState

# @intent:responsibility MOS 6502 CPUの状態（レジスタ、7つの独立したフラグ）を保持する。
# @intent:rationale フラグはP(ステータス)レジスタのビットではなく独立したboolとして保持する。
#                  命令が定義上触れないフラグは、そのまま引き継がれる。
@dataclass
class Mos6502CpuState(CpuState):
    """
    MOS 6502 CPUのレジスタ状態。
    A, X, Y, SPは常に8bit、PCは常に16bitに丸められる。
    """
    a: int = 0
    x: int = 0
    y: int = 0
    flag_n: bool = False  # Negative
    flag_v: bool = False  # Overflow
    flag_b: bool = False  # Break Command
    flag_d: bool = False  # Decimal Mode
    flag_i: bool = False  # Interrupt Disable
    flag_z: bool = False  # Zero
    flag_c: bool = False  # Carry

    # Flag bit masks (スタック上のステータスバイト表現)
    C_FLAG = 0x01
    Z_FLAG = 0x02
    I_FLAG = 0x04
    D_FLAG = 0x08
    B_FLAG = 0x10
    R_FLAG = 0x20  # Reserved (Always 1)
    V_FLAG = 0x40
    N_FLAG = 0x80

    def __post_init__(self):
        self.a &= 0xFF
        self.x &= 0xFF
        self.y &= 0xFF
        self.sp &= 0xFF
        self.pc &= 0xFFFF

    # @intent:responsibility 7つのフラグをNV1BDIZCの順でパックしたステータスバイトを返す。
    @property
    def p(self) -> int:
        value = self.R_FLAG
        if self.flag_n: value |= self.N_FLAG
        if self.flag_v: value |= self.V_FLAG
        if self.flag_b: value |= self.B_FLAG
        if self.flag_d: value |= self.D_FLAG
        if self.flag_i: value |= self.I_FLAG
        if self.flag_z: value |= self.Z_FLAG
        if self.flag_c: value |= self.C_FLAG
        return value

    # @intent:responsibility ステータスバイトを展開した新しいインスタンスを返す (PLP, RTI用)。
    def with_p(self, value: int) -> 'Mos6502CpuState':
        return self.replace(
            flag_n=bool(value & self.N_FLAG),
            flag_v=bool(value & self.V_FLAG),
            flag_b=bool(value & self.B_FLAG),
            flag_d=bool(value & self.D_FLAG),
            flag_i=bool(value & self.I_FLAG),
            flag_z=bool(value & self.Z_FLAG),
            flag_c=bool(value & self.C_FLAG),
        )

    # @intent:responsibility スタックポインタが指す物理アドレス ($0100-$01FF)。
    @property
    def stack_address(self) -> int:
        return 0x0100 | self.sp

    # @intent:responsibility 指定したフラグだけを変更した新しいインスタンスを返す（不変性の維持）。
    # @intent:pre-condition キーワードは n, v, b, d, i, z, c のいずれか。それ以外はTypeErrorとなる。
    def update_flags(self, **kwargs) -> 'Mos6502CpuState':
        changes = {f"flag_{name.lower()}": bool(value) for name, value in kwargs.items()}
        return self.replace(**changes)

    # @intent:responsibility dataclasses.replaceのラッパー。
    def replace(self, **changes) -> 'Mos6502CpuState':
        return replace(self, **changes)
