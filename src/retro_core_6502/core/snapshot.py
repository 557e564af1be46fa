# retro_core_6502/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとメモリアクセスの状態を記録した不変のデータ構造と、
外部のプレゼンテーション層へ渡す命令トレースレコードを定義します。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from retro_core_6502.core.state import CpuState
from retro_core_6502.transport.memory import BusAccess


# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "A9"
    mnemonic: str # 例: "LDA"
    operands: List[str] = field(default_factory=list) # 例: ["#$55"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト
    cycle_count: int = 0 # 参考値としてのクロックサイクル数
    length: int = 1 # 命令のバイト長
    mode: str = "" # アドレッシングモード名
    operand_value: Optional[int] = None # 解決されたオペランド値
    effective_address: Optional[int] = None # 解決された実効アドレス

# @intent:responsibility 診断用の命令トレースレコード。
# @intent:rationale レコードの生成はレジスタやフラグの結果に影響しません。
@dataclass(frozen=True)
class TraceRecord:
    address: int
    opcode: int
    mnemonic: str
    operand_text: str = ""
    operand_value: Optional[int] = None
    effective_address: Optional[int] = None

    @property
    def text(self) -> str:
        return f"{self.mnemonic} {self.operand_text}".strip()

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、トレース文字列）を記録するデータクラス。
    """
    cycle_count: int
    trace_text: Optional[str] = None # 例: "LDA #$55"

# @intent:responsibility ある一時点におけるCPUとメモリアクセスの状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1命令実行後の、CPUの状態とその命令で発生したメモリアクセスを記録した不変のデータ構造。
    stateは実行後の状態のコピーであり、以後のstepで変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
