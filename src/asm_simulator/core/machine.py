# asm_simulator/core/machine.py
"""
Core Layer (実行エンジン)

このモジュールは、レジスタバンク・疎なメモリ・スタックを所有し、
MOV / XCHG / PUSH / POP および直接代入 (SET) の意味論を実装します。
各操作は原子的であり、全ての入力を検証してから状態を変更します。
"""
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union

from asm_simulator.common.hexcodec import format_word, parse_hex, parse_offset
from asm_simulator.common.types import (
    AddressingMode, Register, RegisterInfo, RegisterLayoutInfo, Word
)
from asm_simulator.core.addressing import resolve_address
from asm_simulator.core.errors import InvalidOperandError
from asm_simulator.core.operand import MemoryOperand, Operand, RegisterOperand
from asm_simulator.core.snapshot import MachineView, Metadata, Operation, Snapshot
from asm_simulator.core.state import RegisterState
from asm_simulator.transport.memory import SparseMemory
from asm_simulator.transport.stack import Stack

logger = logging.getLogger(__name__)

Offset = Union[int, str, None]


# @intent:responsibility マシン状態を所有し、5つの操作ハンドラとアドレス解決、読み取り専用の問い合わせ面を提供します。
class MachineState:
    """
    16bit命令実行エンジン。
    生成時は全レジスタ0000、メモリ空、スタック空の状態です。
    状態の変更は操作ハンドラ（execute_*）と、初期化用のload_*系メソッドに限られます。
    """
    # @intent:responsibility レジスタ、メモリ、スタックを初期状態で生成します。
    def __init__(self):
        self._registers = RegisterState()
        self._memory = SparseMemory()
        self._stack = Stack()
        self._sequence: int = 0
        # @intent:rationale 内部状態の直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスはget_*系メソッドを介して行う。

    # @intent:responsibility マシンを初期状態に戻します。
    def reset(self) -> None:
        self._registers = RegisterState()
        self._memory.clear()
        self._stack.clear()
        self._sequence = 0
        logger.info("Machine reset")

    # --- 内部状態へのアクセス ---

    def get_state(self) -> RegisterState:
        """現在のレジスタ状態（エンジンが保持する実体）を返します。"""
        return self._registers

    def get_memory(self) -> SparseMemory:
        return self._memory

    def get_stack_store(self) -> Stack:
        return self._stack

    def read_register(self, register: Register) -> Word:
        return self._registers.get(self._require_register(register))

    # @intent:responsibility 初期化・取り消し用にレジスタとスタックを復元します。
    def restore_state(self, registers: RegisterState, stack: Optional[Iterable[int]] = None) -> None:
        self._registers.copy_from(registers)
        if stack is not None:
            self._stack.replace(stack)

    # @intent:responsibility 初期化用のバックドアです。アクセスログには記録されません。
    def load_register(self, register: Register, value: Word) -> None:
        self._registers.set(self._require_register(register), value)

    def load_memory(self, address: int, value: Optional[Word]) -> None:
        self._memory.restore(address, value)

    # --- アドレス解決 ---

    # @intent:responsibility 現在のレジスタ値から実効アドレスを計算します。
    # @intent:pre-condition offsetは整数、または1〜4桁のHEX文字列（空ならば0）である必要があります。
    def resolve_address(self, mode: AddressingMode, offset: Offset = 0) -> Word:
        return resolve_address(mode, self._registers, parse_offset(offset))

    # --- 操作ハンドラ ---

    # @intent:responsibility ソースの16bit値をデスティネーションへコピーします。ソースは変更されません。
    # @intent:rationale メモリ同士の場合もアドレスを先に両方解決し、ソースの読み込み→デスティネーションへの書き込みの順で行います。
    def execute_mov(self, source: Operand, destination: Operand, offset: Offset = 0) -> Snapshot:
        src = self._require_operand(source)
        dst = self._require_operand(destination)
        off = parse_offset(offset)
        self._memory.get_and_clear_activity_log()

        src_addr = self._address_of(src, off)
        dst_addr = self._address_of(dst, off)

        value = self._read(src, src_addr)
        self._write(dst, dst_addr, value)

        return self._create_snapshot(Operation("MOV", [self._render(dst, off), self._render(src, off)]))

    # @intent:responsibility ソースとデスティネーションの値を交換します。
    # @intent:post-condition 同一レジスタ、または同一アドレスに解決されるメモリ同士の場合、状態は変化しません。
    def execute_xchg(self, source: Operand, destination: Operand, offset: Offset = 0) -> Snapshot:
        src = self._require_operand(source)
        dst = self._require_operand(destination)
        off = parse_offset(offset)
        self._memory.get_and_clear_activity_log()

        src_addr = self._address_of(src, off)
        dst_addr = self._address_of(dst, off)

        operation = Operation("XCHG", [self._render(dst, off), self._render(src, off)])
        if self._same_location(src, src_addr, dst, dst_addr):
            return self._create_snapshot(operation)

        src_value = self._read(src, src_addr)
        dst_value = self._read(dst, dst_addr)
        self._write(dst, dst_addr, src_value)
        self._write(src, src_addr, dst_value)

        return self._create_snapshot(operation)

    # @intent:responsibility レジスタの値をスタックの先頭（新しいトップ）に積みます。
    def execute_push(self, source: Register) -> Snapshot:
        register = self._require_register(source)
        self._memory.get_and_clear_activity_log()
        self._stack.push(self._registers.get(register))
        return self._create_snapshot(Operation("PUSH", [register.value]))

    # @intent:responsibility スタックの先頭を取り出し、レジスタへ書き込みます。
    # @intent:post-condition スタックが空の場合はEmptyStackErrorを送出し、レジスタもスタックも変化しません。
    def execute_pop(self, destination: Register) -> Snapshot:
        register = self._require_register(destination)
        self._memory.get_and_clear_activity_log()
        value = self._stack.pop()
        self._registers.set(register, value)
        return self._create_snapshot(Operation("POP", [register.value]))

    # @intent:responsibility HEX文字列を検証し、レジスタへ直接代入します。
    # @intent:post-condition 入力が1〜4桁のHEXでない場合はInvalidHexInputErrorを送出し、レジスタは変化しません。
    def execute_set(self, destination: Register, raw_input: str) -> Snapshot:
        register = self._require_register(destination)
        value = parse_hex(raw_input)
        self._memory.get_and_clear_activity_log()
        self._registers.set(register, value)
        return self._create_snapshot(Operation("SET", [register.value, format_word(value)]))

    # --- 問い合わせ面 (表示層向け) ---

    # @intent:responsibility 現在のレジスタ値を4桁HEX文字列の辞書として提供します。
    def get_register_map(self) -> Dict[str, str]:
        return {register.value: format_word(value) for register, value in self._registers.as_dict().items()}

    # @intent:responsibility 書き込み済みのメモリのみをアドレス順に提供します。
    def get_memory_map(self) -> Dict[str, str]:
        return {format_word(address): format_word(value) for address, value in self._memory.items()}

    def get_stack(self) -> List[str]:
        """スタックの内容をトップから順に返します。"""
        return [format_word(value) for value in self._stack]

    def view(self) -> MachineView:
        return MachineView(
            registers=self.get_register_map(),
            memory=self.get_memory_map(),
            stack=self.get_stack(),
        )

    # @intent:responsibility 表示層のレジスタ表示レイアウト（グループ化）を定義します。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [
                RegisterInfo("AX", 16), RegisterInfo("BX", 16), RegisterInfo("CX", 16), RegisterInfo("DX", 16)
            ]),
            RegisterLayoutInfo("Pointer/Index", [
                RegisterInfo("BP", 16), RegisterInfo("SI", 16), RegisterInfo("DI", 16)
            ])
        ]

    # --- 内部ヘルパー ---

    @staticmethod
    def _require_operand(operand: Operand) -> Operand:
        if isinstance(operand, (RegisterOperand, MemoryOperand)):
            return operand
        if isinstance(operand, Register):
            return RegisterOperand(operand)
        raise InvalidOperandError(operand)

    @staticmethod
    def _require_register(register: Register) -> Register:
        if isinstance(register, RegisterOperand):
            return register.register
        if isinstance(register, Register):
            return register
        raise InvalidOperandError(register, f"Operand {register!r} is not a register.")

    def _address_of(self, operand: Operand, offset: Word) -> Optional[Word]:
        if isinstance(operand, MemoryOperand):
            return resolve_address(operand.mode, self._registers, offset)
        return None

    def _read(self, operand: Operand, address: Optional[Word]) -> Word:
        if isinstance(operand, MemoryOperand):
            return self._memory.read(address)
        return self._registers.get(operand.register)

    def _write(self, operand: Operand, address: Optional[Word], value: Word) -> None:
        if isinstance(operand, MemoryOperand):
            self._memory.write(address, value)
        else:
            self._registers.set(operand.register, value)

    @staticmethod
    def _same_location(a: Operand, a_addr: Optional[Word], b: Operand, b_addr: Optional[Word]) -> bool:
        if isinstance(a, MemoryOperand) and isinstance(b, MemoryOperand):
            return a_addr == b_addr
        return a == b

    @staticmethod
    def _render(operand: Operand, offset: Word) -> str:
        if isinstance(operand, MemoryOperand):
            return operand.render(offset)
        return operand.render()

    # @intent:responsibility スナップショットを生成します。
    # @intent:rationale レジスタ状態はdataclasses.replaceでコピーし、後続の操作がスナップショットを変化させないようにします。
    def _create_snapshot(self, operation: Operation) -> Snapshot:
        memory_activity = self._memory.get_and_clear_activity_log()
        self._sequence += 1
        description = operation.render()
        logger.debug("#%d %s", self._sequence, description)
        return Snapshot(
            state=replace(self._registers),
            stack=tuple(self._stack),
            operation=operation,
            metadata=Metadata(sequence=self._sequence, description=description),
            memory_activity=memory_activity,
        )
