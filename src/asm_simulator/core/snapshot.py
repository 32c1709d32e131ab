# asm_simulator/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1操作の実行直後におけるマシンの完全な状態を記録した不変のデータ構造と、
表示層へ提供する読み取り専用ビューを定義します。
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from asm_simulator.core.state import RegisterState
from asm_simulator.transport.memory import MemoryAccess, MemoryAccessType


# @intent:responsibility 実行された操作の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された操作の詳細（ニーモニック、オペランド）を記録するデータクラス。
    """
    mnemonic: str # 例: "MOV"
    operands: List[str] = field(default_factory=list) # 例: ["AX", "[BX+SI+0002]"]

    def render(self) -> str:
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic} " + ", ".join(self.operands)

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計操作数、表示用テキスト）を記録するデータクラス。
    """
    sequence: int
    description: Optional[str] = None # 例: "MOV AX, [BX+0002]"

# @intent:responsibility ある一時点におけるレジスタ、スタック、メモリアクセスの状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    ある操作の実行直後の状態を記録した不変のデータ構造。
    stateはエンジンの保持するRegisterStateのコピーであり、以降の操作の影響を受けません。
    """
    state: RegisterState
    stack: Tuple[int, ...]
    operation: Operation
    metadata: Metadata
    memory_activity: List[MemoryAccess] = field(default_factory=list)

    # @intent:responsibility この操作で書き込まれたアドレスの一覧を返します。
    def written_addresses(self) -> List[int]:
        return [a.address for a in self.memory_activity if a.access_type == MemoryAccessType.WRITE]


# @intent:responsibility 表示層に提供する読み取り専用ビュー。全ての数値は4桁大文字HEX文字列です。
@dataclass(frozen=True)
class MachineView:
    registers: Dict[str, str]
    memory: Dict[str, str]
    stack: List[str]
