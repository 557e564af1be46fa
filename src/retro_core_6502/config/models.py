from dataclasses import dataclass, field
from typing import Dict

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0xFD
    registers: Dict[str, int] = field(default_factory=dict) # a, x, y
    flags: Dict[str, bool] = field(default_factory=dict) # n, v, b, d, i, z, c

@dataclass
class RuntimeOptions:
    trace: bool = False # 各命令のトレースをINFOレベルでログ出力する

@dataclass
class SystemConfig:
    architecture: str = "MOS6502"
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    options: RuntimeOptions = field(default_factory=RuntimeOptions)
