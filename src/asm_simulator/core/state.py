# asm_simulator/core/state.py
"""
Core Layer (レジスタ状態)

このモジュールは、マシンのレジスタバンクを保持するデータ構造を定義します。
"""
from dataclasses import dataclass, fields
from typing import Dict

from asm_simulator.common.types import Register, Word

# @intent:responsibility 7本の16bitレジスタの状態を保持します。
# @intent:invariant 全てのフィールドは常に 0x0000-0xFFFF の範囲に収まります。
@dataclass
class RegisterState:
    """
    レジスタ状態を保持するデータクラス。
    文字列キーの辞書ではなく固定のフィールドとして定義し、レジスタ集合を閉じたものにします。
    """
    ax: int = 0x0000
    bx: int = 0x0000
    cx: int = 0x0000
    dx: int = 0x0000
    bp: int = 0x0000  # Base Pointer
    si: int = 0x0000  # Source Index
    di: int = 0x0000  # Destination Index

    # @intent:accessor Register列挙子から値を取得します。
    def get(self, register: Register) -> Word:
        return getattr(self, register.field_name)

    # @intent:accessor Register列挙子で指定したレジスタに値を設定します。
    # @intent:rationale 範囲外の値は16bitでラップアラウンドさせ、不変条件を常に保ちます。
    def set(self, register: Register, value: Word) -> None:
        setattr(self, register.field_name, value & 0xFFFF)

    def as_dict(self) -> Dict[Register, Word]:
        return {register: self.get(register) for register in Register}

    # @intent:responsibility 別のRegisterStateの内容をこのインスタンスへ上書きコピーします。
    def copy_from(self, other: "RegisterState") -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))
