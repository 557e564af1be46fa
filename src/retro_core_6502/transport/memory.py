# retro_core_6502/transport/memory.py
"""
Transport Layer (メモリ空間)

このモジュールは、6502の16bitアドレス空間全体を一枚のバイト配列として表現し、
読み書きアクセスの記録を行う責務を負います。
ページングや保護、メモリマップドI/Oは扱いません。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

ADDRESS_SPACE_SIZE = 0x10000

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のメモリアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class BusAccess:
    """
    メモリ上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 8bit value
    access_type: BusAccessType

# @intent:responsibility 64KiBのフラットなアドレス空間を提供します。
# @intent:rationale アドレスは16bit、データは8bitでマスクします。範囲外アクセスは例外ではなく
#                  ラップアラウンドとして扱います（実機と同じ挙動）。
class Memory:
    """
    プロセッサ1台が専有する64KiBのメモリ。
    read/writeは全てアクティビティログに記録され、Snapshotに含められます。
    """
    # @intent:responsibility メモリ領域とアクティビティログを初期化します。
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int = ADDRESS_SPACE_SIZE):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("Memory size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size
        self._activity_log: List[BusAccess] = []

    # @intent:responsibility メモリのサイズを返します。
    def get_size(self) -> int:
        return self._size

    def _wrap(self, address: int) -> int:
        return (address & 0xFFFF) % self._size

    # @intent:responsibility 記録されたアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        """
        現在のアクティビティログを返し、内部ログをクリアします。
        """
        log = self._activity_log
        self._activity_log = []
        return log

    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します。
    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        アクセスはログに記録されます。
        """
        address = self._wrap(address)
        data = self._memory[address]
        self._activity_log.append(BusAccess(address, data, BusAccessType.READ))
        return data

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します（ログ記録なし）。
        トレース表示などのインスペクタ用。
        """
        return self._memory[self._wrap(address)]

    # @intent:responsibility リトルエンディアンの16bit値をログ記録なしで読み出します。
    def peek_word(self, address: int) -> int:
        return self.peek(address) | (self.peek(address + 1) << 8)

    # @intent:responsibility 指定されたアドレスに8bitのデータを書き込みます。
    def write(self, address: int, data: int) -> None:
        address = self._wrap(address)
        data &= 0xFF
        self._memory[address] = data
        self._activity_log.append(BusAccess(address, data, BusAccessType.WRITE))

    # @intent:responsibility 外部ローダーがプログラムイメージを配置するための一括書き込み。
    # @intent:rationale 実行中のアクセスではないため、アクティビティログには記録しません。
    def load(self, origin: int, data: Iterable[int]) -> None:
        """
        originから順にdataを書き込みます。$FFFFを越えた分は$0000へ折り返します。
        """
        if isinstance(data, str):
            raise TypeError("Memory image must be bytes or an iterable of ints, not str.")
        for offset, value in enumerate(data):
            if not 0 <= value <= 0xFF:
                raise ValueError(f"Data {value} is not an 8-bit value.")
            self._memory[self._wrap(origin + offset)] = value

    # @intent:responsibility メモリ範囲の内容をログ記録なしで返します。
    def dump(self, start: int, length: int) -> bytes:
        return bytes(self.peek(start + i) for i in range(length))
