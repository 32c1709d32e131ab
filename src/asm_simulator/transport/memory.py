# asm_simulator/transport/memory.py
"""
Transport Layer (疎なメモリ)

このモジュールは、16bitアドレス空間を疎な辞書として表現し、
読み書きアクセスを記録する責務を負います。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from asm_simulator.common.types import Word

# @intent:responsibility メモリアクセスを記録するためのタイプを定義します。
class MemoryAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のメモリアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class MemoryAccess:
    """
    メモリ上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 16bit value
    access_type: MemoryAccessType
    previous_data: Optional[int] = None # WRITE時の書き込み前の値。未書き込みのアドレスならNone

# @intent:responsibility 16bitアドレスから16bit値への疎なマッピングを管理します。
# @intent:invariant キーと値は常に 0x0000-0xFFFF の範囲に収まります。明示的に書き込まれたアドレスのみが保持されます。
class SparseMemory:
    """
    未書き込みのアドレスは論理的にゼロとして扱う疎なメモリ。
    読み込みによってエントリが生成されることはありません。
    """
    def __init__(self):
        self._cells: Dict[int, int] = {}
        self._activity_log: List[MemoryAccess] = [] # メモリアクセスログ

    # @intent:responsibility アドレスと値の範囲を検査します。
    # @intent:rationale 範囲外の値はエンジン内部のプログラミングエラーであり、ユーザー入力エラーとは区別します。
    @staticmethod
    def _check_address(address: int) -> None:
        if not 0 <= address <= 0xFFFF:
            raise ValueError(f"Address {address} is not a 16-bit address.")

    @staticmethod
    def _check_data(data: int) -> None:
        if not 0 <= data <= 0xFFFF:
            raise ValueError(f"Data {data} is not a 16-bit value.")

    def _log_access(self, access: MemoryAccess) -> None:
        self._activity_log.append(access)

    # @intent:responsibility 記録されたアクセスログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[MemoryAccess]:
        log = self._activity_log
        self._activity_log = [] # ログをクリア
        return log

    # @intent:responsibility 指定されたアドレスから16bitのデータを読み出します。
    # @intent:post-condition 未書き込みのアドレスは0を返し、エントリは生成されません。
    def read(self, address: int) -> Word:
        """
        指定されたアドレスから16bitのデータを読み出します。
        アクセスはログに記録されます。
        """
        data = self.peek(address)
        self._log_access(MemoryAccess(address, data, MemoryAccessType.READ))
        return data

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> Word:
        self._check_address(address)
        return self._cells.get(address, 0x0000)

    # @intent:responsibility 指定されたアドレスに16bitのデータを書き込みます。
    def write(self, address: int, data: int) -> None:
        """
        指定されたアドレスに16bitのデータを書き込みます。
        書き込み前の値（未書き込みならNone）をログに残し、取り消しに利用できるようにします。
        """
        self._check_address(address)
        self._check_data(data)
        previous = self._cells.get(address)
        self._cells[address] = data
        self._log_access(MemoryAccess(address, data, MemoryAccessType.WRITE, previous_data=previous))

    # @intent:responsibility 取り消し・初期化用のバックドアです。ログには記録されません。
    # @intent:rationale previousがNoneの場合はエントリ自体を削除し、「未書き込み」の状態に戻します。
    def restore(self, address: int, previous: Optional[int]) -> None:
        self._check_address(address)
        if previous is None:
            self._cells.pop(address, None)
        else:
            self._check_data(previous)
            self._cells[address] = previous

    def clear(self) -> None:
        self._cells.clear()
        self._activity_log = []

    def contains(self, address: int) -> bool:
        return address in self._cells

    # @intent:responsibility 書き込み済みのセルをアドレス順に列挙します。
    def items(self) -> Iterator[Tuple[int, int]]:
        return iter(sorted(self._cells.items()))

    def __len__(self) -> int:
        return len(self._cells)
