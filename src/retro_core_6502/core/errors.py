# retro_core_6502/core/errors.py
"""
Core Layer (例外定義)

命令実行エンジンが呼び出し元へ伝搬する例外を定義します。
アドレス計算のラップアラウンドは正常動作であり、ここには含まれません。
"""


# @intent:responsibility エミュレーション中に発生する全ての例外の基底クラス。
class EmulationError(Exception):
    pass


# @intent:responsibility 命令表に存在しないオペコードをフェッチしたことを表します。
# @intent:rationale 停止・スキップ・代替動作のどれを選ぶかは step() の呼び出し元が判断します。
class UnknownOpcodeError(EmulationError):
    """
    フェッチしたバイトに対応する命令記述子が無い場合に送出されます。
    送出時点でCPUの状態は一切変更されていません。
    """
    def __init__(self, opcode: int, address: int):
        self.opcode = opcode
        self.address = address
        super().__init__(f"Unknown opcode ${opcode:02X} at ${address:04X}")


# @intent:responsibility 未実装のアドレッシングモードや命令を黙って実行しないための例外。
class UnimplementedError(EmulationError, NotImplementedError):
    """
    アドレッシングモードにリゾルバが無い、または命令にハンドラが無い場合に送出されます。
    ゼロのオペランドを返して誤った実行を隠蔽することを防ぎます。
    """
    pass
