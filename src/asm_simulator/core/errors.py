"""
エンジンが送出する例外の定義。

いずれも回復可能なエラーであり、送出された時点でマシン状態は一切変更されていません。
"""
from typing import Optional


# @intent:responsibility エンジン由来の全ての回復可能エラーの基底クラス。
class MachineError(Exception):
    pass


# @intent:responsibility 空のスタックに対するPOPを表します。
class EmptyStackError(MachineError):
    def __init__(self, message: str = "Stack is empty."):
        super().__init__(message)


# @intent:responsibility 1〜4桁のHEX文字列という入力契約の違反を表します。
# @intent:rationale ValueErrorも継承し、数値変換エラーとして扱う呼び出し元とも互換を保ちます。
class InvalidHexInputError(MachineError, ValueError):
    def __init__(self, raw: object, message: Optional[str] = None):
        self.raw = raw
        if message is None:
            message = f"Invalid HEX value {raw!r}: expected 1 to 4 hexadecimal digits."
        super().__init__(message)


# @intent:responsibility 未知のオペランド指定子や、操作に適さない種類のオペランドを表します。
class InvalidOperandError(MachineError, ValueError):
    def __init__(self, selector: object, message: Optional[str] = None):
        self.selector = selector
        if message is None:
            message = f"Invalid operand {selector!r}."
        super().__init__(message)
