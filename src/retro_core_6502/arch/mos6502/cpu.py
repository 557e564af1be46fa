# src/retro_core_6502/arch/mos6502/cpu.py
"""
MOS 6502 CPUエミュレーションの中心モジュール。
"""
import logging
from typing import Dict, List

from retro_core_6502.core.cpu import AbstractCpu, StepOutcome
from retro_core_6502.core.errors import UnknownOpcodeError, UnimplementedError
from retro_core_6502.core.snapshot import Operation
from retro_core_6502.common.types import RegisterLayoutInfo, RegisterInfo
from retro_core_6502.transport.memory import Memory
from retro_core_6502.arch.mos6502.state import Mos6502CpuState
from retro_core_6502.arch.mos6502.instructions.base import resolve_operand
from retro_core_6502.arch.mos6502.instructions.maps import (
    InstructionDescriptor, OPCODE_TABLE, OpcodeTable, lookup
)

logger = logging.getLogger(__name__)

# @intent:responsibility MOS 6502 CPUの具体的なエミュレーションロジックを提供する。
class Mos6502Cpu(AbstractCpu):
    """
    MOS 6502 CPUをエミュレートするクラス。
    命令表はプロセス全体で共有される不変のOPCODE_TABLEを参照する。
    """
    def __init__(self, memory: Memory, opcode_table: OpcodeTable = OPCODE_TABLE):
        self._opcode_table = opcode_table
        super().__init__(memory)

    # @intent:responsibility MOS 6502の初期状態を生成する。
    # @intent:note SP=$FD, I=1 はパワーオン直後の一般的な値。リセットベクタの読み込みは行わず、PCは$0000。
    def _create_initial_state(self) -> Mos6502CpuState:
        return Mos6502CpuState(sp=0xFD, flag_i=True)

    def get_state(self) -> Mos6502CpuState:
        return self._state

    # @intent:responsibility 命令フェッチ。
    def _fetch(self) -> int:
        return self._memory.read(self._state.pc)

    # @intent:responsibility 命令デコード
    def _decode(self, opcode: int) -> InstructionDescriptor:
        descriptor = lookup(opcode, self._opcode_table)
        if descriptor is None:
            logger.warning("Unknown opcode $%02X at $%04X", opcode, self._state.pc)
            raise UnknownOpcodeError(opcode, self._state.pc)
        return descriptor

    # @intent:responsibility オペランドを解決して命令を実行する。
    # @intent:rationale ハンドラにはPCが命令の先頭を指したままの状態を渡す。
    #                  PCを書き換えたかどうかはハンドラ自身が ExecResult.pc_redirected で申告する。
    #                  PCの比較で推測すると、自分自身への分岐 (BCC $FE 等) を見誤るため。
    def _execute(self, opcode: int, descriptor: InstructionDescriptor) -> StepOutcome:
        if descriptor.handler is None:
            raise UnimplementedError(f"Instruction {descriptor.mnemonic} is not implemented.")

        operand = resolve_operand(
            descriptor.mode, self._state.pc, self._memory, self._state, descriptor.reads_operand
        )
        result = descriptor.handler(self._state, self._memory, operand)
        self._state = result.state

        operation = Operation(
            opcode_hex=f"{opcode:02X}",
            mnemonic=descriptor.mnemonic,
            operands=[operand.text] if operand.text else [],
            operand_bytes=list(operand.operand_bytes),
            cycle_count=descriptor.cycles,
            length=descriptor.length,
            mode=descriptor.mode.value,
            operand_value=operand.value,
            effective_address=operand.address,
        )
        return StepOutcome(operation, result.pc_redirected)

    # @intent:responsibility レジスタマップ（表示用）を返す。
    def get_register_map(self) -> Dict[str, int]:
        state = self._state
        return {
            "A": state.a,
            "X": state.x,
            "Y": state.y,
            "PC": state.pc,
            "S": state.sp,
            "P": state.p
        }

    # @intent:responsibility フラグ状態（表示用）を返す。
    def get_flag_state(self) -> Dict[str, bool]:
        state = self._state
        return {
            "N": state.flag_n,
            "V": state.flag_v,
            "B": state.flag_b,
            "D": state.flag_d,
            "I": state.flag_i,
            "Z": state.flag_z,
            "C": state.flag_c
        }

    # @intent:responsibility レジスタレイアウト定義を返す。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("Registers", [
                RegisterInfo("A", 8),
                RegisterInfo("X", 8),
                RegisterInfo("Y", 8),
                RegisterInfo("S", 8),
                RegisterInfo("P", 8)
            ]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("PC", 16)
            ])
        ]

    # @intent:responsibility レジスタとフラグを1行のテキストにする簡易レンダラ。
    def format_state(self) -> str:
        state = self._state
        flags = "".join(name for name, value in self.get_flag_state().items() if value)
        return (f"PC:{state.pc:04X} A:{state.a:02X} X:{state.x:02X} Y:{state.y:02X} "
                f"SP:{state.sp:02X} FLAGS:{flags}")
