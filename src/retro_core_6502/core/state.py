# retro_core_6502/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（レジスタ群）を保持するデータ構造を定義します。
"""
from dataclasses import dataclass

# @intent:responsibility 全アーキテクチャに共通するPCとSPを保持します。固有のレジスタはサブクラスで追加します。
@dataclass
class CpuState:
    """
    CPUのレジスタ状態を保持するデータクラス。
    これは抽象的な基底状態であり、Mos6502CpuStateなどが拡張します。
    """
    pc: int = 0x0000  # Program Counter (次にフェッチするオペコードのアドレス)
    sp: int = 0x0000  # Stack Pointer
