# retro_core_6502/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from retro_core_6502.transport.memory import Memory
from retro_core_6502.core.snapshot import Snapshot, Operation, Metadata, TraceRecord
from retro_core_6502.core.state import CpuState
from retro_core_6502.common.types import RegisterLayoutInfo

logger = logging.getLogger(__name__)

TraceHandler = Callable[[TraceRecord], None]

# @intent:responsibility Resolve-and-Dispatch段の結果。
# @intent:rationale 命令がPCを書き換えたかどうかを明示的に受け取り、Advance段で命令長を二重に加算しないようにします。
class StepOutcome(NamedTuple):
    operation: Operation
    pc_redirected: bool = False

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Memoryとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:responsibility CPUの状態とメモリへの参照を初期化します。
    # @intent:pre-condition `memory`はこのCPUが専有するMemoryオブジェクトである必要があります。
    def __init__(self, memory: Memory):
        self._memory = memory
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        self._trace_handler: Optional[TraceHandler] = None

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        """
        レジスタとフラグを初期値に戻し、累計サイクル数をクリアします。メモリには触れません。
        """
        self._state = self._create_initial_state()
        self._cycle_count = 0

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 外部（テストハーネスやローダー）からCPUの状態を設定します。
    def set_state(self, state: CpuState) -> None:
        self._state = state

    @property
    def memory(self) -> Memory:
        return self._memory

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # @intent:responsibility 命令トレースの受け取り先を設定します。Noneで解除します。
    def set_trace_handler(self, handler: Optional[TraceHandler]) -> None:
        self._trace_handler = handler

    # @intent:responsibility 現在のPCからオペコードをフェッチします。PCは変更しません。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility オペコードを命令記述子に変換します。
    # @intent:post-condition 未知のオペコードであればUnknownOpcodeErrorを送出し、状態は変更されません。
    @abstractmethod
    def _decode(self, opcode: int) -> Any:
        pass

    # @intent:responsibility オペランドを解決して命令を実行し、その結果を返します。
    @abstractmethod
    def _execute(self, opcode: int, decoded: Any) -> StepOutcome:
        """
        アドレッシングモードに従ってオペランドを解決し、命令ハンドラを呼び出します。
        PCは命令の先頭を指したままで呼び出されます。
        """
        pass

    # @intent:responsibility CPUを1命令進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターン。Fetch → Resolve-and-Dispatch → Advance の3段を固定し、
    #                  アーキテクチャ固有の振る舞いは抽象メソッドで提供します。
    def step(self) -> Snapshot:
        """
        現在のPCから命令を1つだけ実行し、実行後の状態を含むSnapshotを返します。
        繰り返し実行する場合は呼び出し元がループします。
        """
        # 前サイクルまでの残存ログを破棄
        self._memory.get_and_clear_activity_log()
        initial_pc = self._state.pc

        # 1. Fetch
        opcode = self._fetch()
        decoded = self._decode(opcode)

        # 2. Resolve-and-Dispatch
        outcome = self._execute(opcode, decoded)

        # 3. Advance
        if not outcome.pc_redirected:
            self._update_pc(outcome.operation)

        return self._create_snapshot(initial_pc, opcode, outcome.operation)

    # @intent:responsibility 命令長分PCを進めます。
    # @intent:rationale 呼び出し元が保持している状態オブジェクトを書き換えないよう、新しいインスタンスを生成します。
    def _update_pc(self, operation: Operation) -> None:
        self._state = replace(self._state, pc=(self._state.pc + operation.length) & 0xFFFF)

    # @intent:responsibility スナップショットを生成し、トレースを通知します。
    def _create_snapshot(self, initial_pc: int, opcode: int, operation: Operation) -> Snapshot:
        bus_activity = self._memory.get_and_clear_activity_log()
        self._cycle_count += operation.cycle_count

        record = TraceRecord(
            address=initial_pc,
            opcode=opcode,
            mnemonic=operation.mnemonic,
            operand_text=", ".join(operation.operands),
            operand_value=operation.operand_value,
            effective_address=operation.effective_address,
        )
        if logger.isEnabledFor(logging.DEBUG):
            hex_bytes = " ".join(f"{b:02X}" for b in [opcode] + list(operation.operand_bytes))
            logger.debug("$%04X  %-8s  %s", initial_pc, hex_bytes, record.text)
        if self._trace_handler is not None:
            self._trace_handler(record)

        return Snapshot(
            state=copy.copy(self._state), # 以後のstepから独立させる
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, trace_text=record.text),
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        表示側がCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """
        レジスタをどのように配置・グループ化すべきかの定義を返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグの各ビットの状態を辞書形式で返す。
        """
        pass
