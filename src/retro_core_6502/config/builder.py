import logging
from typing import Tuple

from retro_core_6502.transport.memory import Memory
from retro_core_6502.core.snapshot import TraceRecord
from retro_core_6502.arch.mos6502.cpu import Mos6502Cpu
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

_REGISTERS = ("a", "x", "y")
_FLAGS = ("n", "v", "b", "d", "i", "z", "c")

def _log_trace(record: TraceRecord) -> None:
    logger.info("$%04X  %s", record.address, record.text)

# @intent:responsibility システム構成（Config）に基づいて、MemoryとCPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[Mos6502Cpu, Memory]:
        if not isinstance(config.architecture, str) or config.architecture.upper() != "MOS6502":
            raise ValueError(f"Unsupported architecture: {config.architecture}")

        memory = Memory()
        cpu = Mos6502Cpu(memory)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        if config.options.trace:
            cpu.set_trace_handler(_log_trace)

        return cpu, memory

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    # @intent:rationale 未知のレジスタ名・フラグ名は設定ミスとして警告し、無視します。
    def apply_initial_state(self, cpu: Mos6502Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()

        changes = {"pc": config_state.pc, "sp": config_state.sp}
        for reg_name, value in config_state.registers.items():
            if reg_name.lower() in _REGISTERS:
                changes[reg_name.lower()] = value
            else:
                logger.warning("Unknown register '%s' in initial state, ignored", reg_name)

        for flag_name, value in config_state.flags.items():
            if flag_name.lower() in _FLAGS:
                changes[f"flag_{flag_name.lower()}"] = value
            else:
                logger.warning("Unknown flag '%s' in initial state, ignored", flag_name)

        cpu.set_state(cpu.get_state().replace(**changes))
