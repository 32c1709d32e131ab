import logging
from typing import Any, Dict, Optional

import yaml

from asm_simulator.common.hexcodec import parse_hex
from asm_simulator.core.errors import InvalidHexInputError, InvalidOperandError, MachineError
from asm_simulator.core.operand import parse_register
from .models import MachineConfig

logger = logging.getLogger(__name__)

KNOWN_KEYS = ("registers", "memory", "stack", "history_limit")


# @intent:responsibility 構成ファイルの内容が不正であることを表します。
class ConfigError(MachineError):
    pass


# @intent:responsibility YAML形式の初期状態定義を読み込み、MachineConfigに変換します。
class ConfigLoader:
    def load_from_file(self, path: str) -> MachineConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data)

    def load_from_string(self, text: str) -> MachineConfig:
        return self._parse_config(yaml.safe_load(text))

    def _parse_config(self, data: Optional[Dict[str, Any]]) -> MachineConfig:
        if data is None:
            return MachineConfig()
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping, got {type(data).__name__}.")

        for key in data:
            if key not in KNOWN_KEYS:
                logger.warning("Ignoring unknown configuration key '%s'", key)

        # Parse Registers
        registers_data = data.get("registers") or {}
        if not isinstance(registers_data, dict):
            raise ConfigError("registers must be a mapping of register name to value.")
        registers = {}
        for name, value in registers_data.items():
            try:
                register = parse_register(name)
            except InvalidOperandError as e:
                raise ConfigError(f"registers: {e}") from e
            if register in registers:
                raise ConfigError(f"registers: duplicate entry for {register.value} ({name!r}).")
            registers[register] = self._parse_word(value, f"registers.{name}")

        # Parse Memory
        memory_data = data.get("memory") or {}
        if not isinstance(memory_data, dict):
            raise ConfigError("memory must be a mapping of address to value.")
        memory = {}
        for address, value in memory_data.items():
            addr = self._parse_word(address, f"memory key {address!r}")
            if addr in memory:
                raise ConfigError(f"memory: duplicate entry for address {addr:04X} ({address!r}).")
            memory[addr] = self._parse_word(value, f"memory.{address}")

        # Parse Stack
        stack_data = data.get("stack") or []
        if not isinstance(stack_data, list):
            raise ConfigError("stack must be a list of values (top first).")
        stack = [self._parse_word(value, f"stack[{i}]") for i, value in enumerate(stack_data)]

        history_limit = data.get("history_limit")
        if history_limit is not None:
            if isinstance(history_limit, bool) or not isinstance(history_limit, int) or history_limit < 0:
                raise ConfigError(f"history_limit must be a non-negative integer, got {history_limit!r}.")

        return MachineConfig(
            registers=registers,
            memory=memory,
            stack=stack,
            history_limit=history_limit
        )

    def _parse_word(self, value: Any, location: str) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid value for {location}: {value!r}")
        if isinstance(value, int):
            if not 0 <= value <= 0xFFFF:
                raise ConfigError(f"Value for {location} out of 16-bit range: {value}")
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.lower().startswith("0x"):
                text = text[2:]
            try:
                return parse_hex(text)
            except InvalidHexInputError as e:
                raise ConfigError(f"Invalid HEX value for {location}: {value!r}") from e
        raise ConfigError(f"Invalid value for {location}: {value!r}")
