"""
共通の型定義を提供するモジュール。
レジスタ名、アドレッシングモード、およびプロジェクト全体で使用される型エイリアスを定義します。
"""
from enum import Enum
from typing import List, NamedTuple

# @intent:data_structure 内部表現としての16bit値。常に 0x0000-0xFFFF の範囲に収まります。
Word = int

# @intent:data_structure 境界（表示/入力）で使用される4桁大文字HEX文字列。例: "00A1"
HexWord = str


# @intent:responsibility 固定されたレジスタ集合を定義します。
# @intent:rationale 文字列キーの辞書ではなく閉じた列挙型とすることで、未知のレジスタ名を境界で一度だけ拒否できます。
class Register(Enum):
    AX = "AX"
    BX = "BX"
    CX = "CX"
    DX = "DX"
    BP = "BP"
    SI = "SI"
    DI = "DI"

    @property
    def field_name(self) -> str:
        """RegisterState上の対応するフィールド名 (例: "ax")。"""
        return self.value.lower()


# @intent:responsibility メモリオペランドの実効アドレス計算規則を定義します。
class AddressingMode(Enum):
    BASE = "base"              # BX + offset
    INDEX = "index"            # SI + offset
    BASE_INDEX = "base-index"  # BX + SI + offset


# @intent:data_structure 単一のレジスタの表示定義。表示層が動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅 (常に16)

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "General", "Pointer/Index"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]
