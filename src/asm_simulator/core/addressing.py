# asm_simulator/core/addressing.py
"""
アドレッシングモード解決ロジック。
"""
from asm_simulator.common.types import AddressingMode, Register, Word
from asm_simulator.core.state import RegisterState


# @intent:responsibility アドレッシングモード、現在のレジスタ値、オフセットから実効アドレスを計算します。
# @intent:note 16bitでラップアラウンドします (0xFFFF + 2 -> 0x0001)。オーバーフローはエラーではありません。
# @intent:pre-condition offsetは検証済みの整数である必要があります（文字列の解析は呼び出し側の責務）。
def resolve_address(mode: AddressingMode, registers: RegisterState, offset: Word = 0) -> Word:
    if mode == AddressingMode.BASE:
        address = registers.get(Register.BX) + offset
    elif mode == AddressingMode.INDEX:
        address = registers.get(Register.SI) + offset
    elif mode == AddressingMode.BASE_INDEX:
        address = registers.get(Register.BX) + registers.get(Register.SI) + offset
    else:
        raise ValueError(f"Unsupported addressing mode: {mode!r}")
    return address & 0xFFFF
