import yaml
from typing import Dict, Any
from .models import SystemConfig, CpuInitialState, RuntimeOptions

# @intent:responsibility YAML形式のシステム構成を読み込み、SystemConfigへ変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data or {})

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping.")
        arch = data.get("architecture", "MOS6502")
        if not isinstance(arch, str):
            raise ValueError(f"Invalid architecture name: {arch!r}")

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            sp=self._parse_int(initial_state_data.get("sp", 0xFD)),
            registers={
                name: self._parse_int(value)
                for name, value in (initial_state_data.get("registers") or {}).items()
            },
            flags={
                name: self._parse_bool(value)
                for name, value in (initial_state_data.get("flags") or {}).items()
            }
        )

        options_data = data.get("options") or {}
        options = RuntimeOptions(trace=self._parse_bool(options_data.get("trace", False)))

        return SystemConfig(
            architecture=arch,
            initial_state=initial_state,
            options=options
        )

    # @intent:responsibility 整数表現 (10進, "0x..", "$..") を解釈します。
    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                if text.lower().startswith("0x"):
                    return int(text, 16)
                if text.startswith("$"):
                    return int(text[1:], 16)
                return int(text)
            except ValueError:
                raise ValueError(f"Invalid integer format: {value}") from None
        raise ValueError(f"Invalid integer format: {value}")

    # @intent:responsibility 真偽値 (true/false, 0/1) を解釈します。文字列の "false" 等は受け付けません。
    def _parse_bool(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise ValueError(f"Invalid boolean format: {value!r}")
