"""
境界用HEXコーデック。

内部では全ての値を16bit整数として扱い、HEX文字列への変換は表示・入力の境界でのみ行います。
"""
import re
from typing import Optional, Union

from asm_simulator.common.types import HexWord, Word
from asm_simulator.core.errors import InvalidHexInputError

WORD_MASK = 0xFFFF

# @intent:constant 直接代入とオフセットに共通の入力契約 (1〜4桁、大文字小文字を区別しない)。
HEX_INPUT_PATTERN = re.compile(r"[0-9A-Fa-f]{1,4}")


# @intent:responsibility 1〜4桁のHEX文字列を検証し、16bit整数に変換します。
# @intent:pre-condition rawは文字列である必要があります。それ以外はInvalidHexInputErrorとなります。
def parse_hex(raw: str) -> Word:
    """
    "A1" -> 0x00A1 のように変換します。
    長さが不正、HEX以外の文字を含む、空文字列の場合はInvalidHexInputErrorを送出します。
    """
    if not isinstance(raw, str) or not HEX_INPUT_PATTERN.fullmatch(raw):
        raise InvalidHexInputError(raw)
    return int(raw, 16)


# @intent:responsibility オフセット入力を整数に変換します。
# @intent:rationale 未入力（Noneまたは空文字列）は0とみなし、それ以外は直接代入と同じ契約で検証します。
def parse_offset(raw: Union[str, int, None]) -> Word:
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise InvalidHexInputError(raw)
    if isinstance(raw, int):
        return raw & WORD_MASK
    if isinstance(raw, str) and raw.strip() == "":
        return 0
    return parse_hex(raw)


# @intent:responsibility 16bit値を4桁の大文字HEX文字列に整形します。
def format_word(value: Word) -> HexWord:
    return f"{value & WORD_MASK:04X}"


def normalize_hex(raw: str) -> HexWord:
    """入力を検証し、大文字化・ゼロ埋めした4桁表現を返します。例: "a1" -> "00A1"。"""
    return format_word(parse_hex(raw))


def is_valid_hex(raw: Optional[str]) -> bool:
    return isinstance(raw, str) and HEX_INPUT_PATTERN.fullmatch(raw) is not None
