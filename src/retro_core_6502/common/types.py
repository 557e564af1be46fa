"""
共通の型定義を提供するモジュール。
レジスタ表示などプレゼンテーション層が値を解釈するための汎用的な型を定義します。
"""
from typing import List, NamedTuple

# @intent:data_structure 単一のレジスタの表示定義。表示側が動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅 (8 or 16)

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "Registers", "Pointers"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]
