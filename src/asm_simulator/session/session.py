# asm_simulator/session/session.py
"""
セッションモジュール。

表示層から渡される指定子文字列（"AX", "M-base" など）を境界で一度だけ解析してエンジンを駆動し、
実行履歴の保持と取り消し（undo）を行う責務を負います。
"""
import logging
from collections import deque
from dataclasses import replace
from typing import Deque, List, Optional, Tuple

from asm_simulator.core.errors import EmptyStackError, InvalidHexInputError, InvalidOperandError
from asm_simulator.core.machine import MachineState, Offset
from asm_simulator.core.operand import MemoryOperand, parse_operand
from asm_simulator.core.snapshot import MachineView, Snapshot
from asm_simulator.core.state import RegisterState
from asm_simulator.common.types import Register
from asm_simulator.transport.memory import MemoryAccessType

logger = logging.getLogger(__name__)


# @intent:responsibility 1つの論理セッションに対応するエンジンを所有し、コマンド面と実行履歴を提供します。
# @intent:rationale セッション間で状態を共有しないため、ロックは不要です。
class Session:
    """
    表示層向けのコマンド面。
    成功した操作のSnapshotのみを履歴に追加します。失敗した操作は状態も履歴も変更しません。
    """
    def __init__(self, machine: Optional[MachineState] = None, history_limit: Optional[int] = None):
        if history_limit is not None and history_limit < 0:
            raise ValueError("history_limit must be a non-negative integer.")
        self._machine = machine if machine is not None else MachineState()
        self._history_limit = history_limit
        # @intent:responsibility 実行履歴を保持し、取り消しをサポートします。
        self._history: Deque[Snapshot] = deque()
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 履歴が尽きた時に戻るための初期状態を保持します。
        self._initial_state: RegisterState = replace(self._machine.get_state())
        self._initial_stack: Tuple[int, ...] = tuple(self._machine.get_stack_store())

    def get_machine(self) -> MachineState:
        return self._machine

    def get_history(self) -> List[Snapshot]:
        """
        現在の実行履歴を返します。
        """
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def view(self) -> MachineView:
        return self._machine.view()

    # --- コマンド面 ---

    def mov(self, source: str, destination: str, offset: Offset = "") -> Snapshot:
        snapshot = self._machine.execute_mov(parse_operand(source), parse_operand(destination), offset)
        return self._record(snapshot)

    def xchg(self, source: str, destination: str, offset: Offset = "") -> Snapshot:
        snapshot = self._machine.execute_xchg(parse_operand(source), parse_operand(destination), offset)
        return self._record(snapshot)

    def push(self, source: str) -> Snapshot:
        snapshot = self._machine.execute_push(self._parse_register_selector(source, "PUSH"))
        return self._record(snapshot)

    def pop(self, destination: str) -> Snapshot:
        register = self._parse_register_selector(destination, "POP")
        try:
            snapshot = self._machine.execute_pop(register)
        except EmptyStackError:
            logger.warning("POP %s rejected: stack is empty", register.value)
            raise
        return self._record(snapshot)

    def set_register(self, destination: str, raw_input: str) -> Snapshot:
        register = self._parse_register_selector(destination, "SET")
        try:
            snapshot = self._machine.execute_set(register, raw_input)
        except InvalidHexInputError:
            logger.warning("SET %s rejected: invalid HEX input %r", register.value, raw_input)
            raise
        return self._record(snapshot)

    # @intent:responsibility 実行履歴を1つ戻り、レジスタ・スタック・メモリの状態を復元します。
    def undo(self) -> Optional[Snapshot]:
        """
        直前の操作を取り消します。
        戻った先のSnapshot（履歴が尽きた場合はNone）を返します。
        """
        if not self._history:
            return None

        # 1. 履歴から最新のスナップショットを取り出し、削除する
        snapshot_to_revert = self._history.pop()
        logger.debug("Undo %s", snapshot_to_revert.operation.render())

        # 2. メモリ書き込みの取り消し
        # アクセスログを逆順にスキャンし、書き込み前の値（未書き込みならエントリ削除）に戻す
        for access in reversed(snapshot_to_revert.memory_activity):
            if access.access_type == MemoryAccessType.WRITE:
                self._machine.load_memory(access.address, access.previous_data)

        # 3. レジスタとスタックの復元
        if self._history:
            previous_snapshot = self._history[-1]
            self._machine.restore_state(previous_snapshot.state, previous_snapshot.stack)
            self._last_snapshot = previous_snapshot
            return previous_snapshot

        self._machine.restore_state(self._initial_state, self._initial_stack)
        self._last_snapshot = None
        return None

    # @intent:responsibility エンジンと履歴を初期状態に戻します。
    def reset(self) -> None:
        self._machine.reset()
        self._history = deque()
        self._last_snapshot = None
        self._initial_state = replace(self._machine.get_state())
        self._initial_stack = tuple(self._machine.get_stack_store())

    # --- 内部ヘルパー ---

    # @intent:responsibility PUSH/POP/SETはレジスタのみを受け付けます。メモリ指定子はInvalidOperandErrorとします。
    @staticmethod
    def _parse_register_selector(selector: str, mnemonic: str) -> Register:
        operand = parse_operand(selector)
        if isinstance(operand, MemoryOperand):
            raise InvalidOperandError(selector, f"{mnemonic} requires a register operand, got {selector!r}.")
        return operand.register

    def _record(self, snapshot: Snapshot) -> Snapshot:
        self._history.append(snapshot)
        self._last_snapshot = snapshot
        # @intent:rationale 上限を超えた最古の履歴は破棄し、その直後の状態を新たな取り消しの起点とします。
        if self._history_limit is not None:
            while len(self._history) > self._history_limit:
                dropped = self._history.popleft()
                self._initial_state = replace(dropped.state)
                self._initial_stack = dropped.stack
        return snapshot
