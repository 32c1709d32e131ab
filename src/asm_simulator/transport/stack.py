# asm_simulator/transport/stack.py
"""
Transport Layer (スタック)

先頭を常にトップとする、上限のないLIFOスタック。
"""
from collections import deque
from typing import Deque, Iterable, Iterator, List

from asm_simulator.common.types import Word
from asm_simulator.core.errors import EmptyStackError

# @intent:responsibility 16bit値の無制限LIFOスタックを管理します。
# @intent:rationale 実機のようなメモリ上の有限スタックではなく、意図的に単純化した独立構造です。
class Stack:
    """
    pushは先頭へ追加し、popは先頭から取り出します。どちらもO(1)です。
    """
    def __init__(self, values: Iterable[int] = ()):
        self._items: Deque[int] = deque()
        self.replace(values)

    def push(self, value: Word) -> None:
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"Data {value} is not a 16-bit value.")
        self._items.appendleft(value)

    # @intent:post-condition 空の場合はEmptyStackErrorを送出し、内容は変化しません。
    def pop(self) -> Word:
        if not self._items:
            raise EmptyStackError()
        return self._items.popleft()

    def peek(self) -> Word:
        if not self._items:
            raise EmptyStackError()
        return self._items[0]

    # @intent:responsibility スタックの内容を丸ごと置き換えます。valuesの先頭がトップになります。
    def replace(self, values: Iterable[int]) -> None:
        new_items = deque()
        for value in values:
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"Data {value} is not a 16-bit value.")
            new_items.append(value)
        self._items = new_items

    def clear(self) -> None:
        self._items.clear()

    def values(self) -> List[Word]:
        """トップから順に並べた値のリストを返します。"""
        return list(self._items)

    def __iter__(self) -> Iterator[Word]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
