from dataclasses import dataclass, field
from typing import Dict, List, Optional

from asm_simulator.common.types import Register

@dataclass
class MachineConfig:
    registers: Dict[Register, int] = field(default_factory=dict)
    memory: Dict[int, int] = field(default_factory=dict)
    stack: List[int] = field(default_factory=list)  # 先頭がトップ
    history_limit: Optional[int] = None
