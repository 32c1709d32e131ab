# asm_simulator/core/operand.py
"""
オペランド定義。

オペランドは「レジスタ」か「メモリ（アドレッシングモード）」のどちらかを表すタグ付き共用体です。
表示層から渡される指定子文字列 ("AX", "M-base" など) は、境界で一度だけ解析されます。
"""
from dataclasses import dataclass
from typing import Union

from asm_simulator.common.types import AddressingMode, Register
from asm_simulator.core.errors import InvalidOperandError

# @intent:constant メモリオペランド指定子の接頭辞。
MEMORY_SELECTOR_PREFIX = "M-"


# @intent:responsibility 単一のレジスタを指すオペランド。
@dataclass(frozen=True)
class RegisterOperand:
    register: Register

    def render(self) -> str:
        return self.register.value


# @intent:responsibility アドレッシングモードで実効アドレスが計算されるメモリオペランド。
# @intent:rationale 実効アドレスは保持せず、実行時のレジスタ値とオフセットから都度計算します。
@dataclass(frozen=True)
class MemoryOperand:
    mode: AddressingMode

    def render(self, offset: int = 0) -> str:
        if self.mode == AddressingMode.BASE:
            expr = "BX"
        elif self.mode == AddressingMode.INDEX:
            expr = "SI"
        else:
            expr = "BX+SI"
        return f"[{expr}+{offset & 0xFFFF:04X}]"


Operand = Union[RegisterOperand, MemoryOperand]


# @intent:responsibility 指定子文字列をOperandに変換します。
# @intent:pre-condition selectorはレジスタ名またはM-base/M-index/M-base-indexのいずれかである必要があります（大文字小文字は区別しない）。
def parse_operand(selector: str) -> Operand:
    """
    "AX" -> RegisterOperand(Register.AX)
    "M-base-index" -> MemoryOperand(AddressingMode.BASE_INDEX)
    未知の指定子はInvalidOperandErrorを送出します。
    """
    if isinstance(selector, (RegisterOperand, MemoryOperand)):
        return selector
    if isinstance(selector, Register):
        return RegisterOperand(selector)
    if not isinstance(selector, str):
        raise InvalidOperandError(selector)

    text = selector.strip()
    if text.upper().startswith(MEMORY_SELECTOR_PREFIX):
        mode_name = text[len(MEMORY_SELECTOR_PREFIX):].lower()
        for mode in AddressingMode:
            if mode.value == mode_name:
                return MemoryOperand(mode)
        raise InvalidOperandError(selector, f"Unknown addressing mode in operand {selector!r}.")

    return RegisterOperand(parse_register(text))


# @intent:responsibility レジスタ名をRegister列挙子に変換します。
def parse_register(name: Union[str, Register]) -> Register:
    if isinstance(name, Register):
        return name
    if not isinstance(name, str):
        raise InvalidOperandError(name)
    try:
        return Register(name.strip().upper())
    except ValueError:
        raise InvalidOperandError(name, f"Unknown register {name!r}.") from None
