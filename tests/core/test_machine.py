# tests/core/test_machine.py
"""
asm_simulator.core.machineモジュールの単体テスト。
MOV / XCHG / PUSH / POP / SET の意味論、エッジケース、原子性を検証します。
"""
import pytest

from asm_simulator.common.types import AddressingMode, Register
from asm_simulator.core.errors import EmptyStackError, InvalidHexInputError, InvalidOperandError
from asm_simulator.core.machine import MachineState
from asm_simulator.core.operand import MemoryOperand, RegisterOperand
from asm_simulator.transport.memory import MemoryAccessType

# @intent:test_suite 実行エンジンの状態管理と各操作ハンドラの検証。

AX = RegisterOperand(Register.AX)
BX = RegisterOperand(Register.BX)
CX = RegisterOperand(Register.CX)
DX_OPERAND = RegisterOperand(Register.DX)
SI = RegisterOperand(Register.SI)
M_BASE = MemoryOperand(AddressingMode.BASE)
M_INDEX = MemoryOperand(AddressingMode.INDEX)
M_BASE_INDEX = MemoryOperand(AddressingMode.BASE_INDEX)


@pytest.fixture
def machine():
    return MachineState()


class TestInitialState:
    # @intent:test_case_init 生成直後は全レジスタ0000、メモリ空、スタック空であることを検証します。
    def test_initial_state(self, machine):
        assert machine.get_register_map() == {
            "AX": "0000", "BX": "0000", "CX": "0000", "DX": "0000",
            "BP": "0000", "SI": "0000", "DI": "0000",
        }
        assert machine.get_memory_map() == {}
        assert machine.get_stack() == []

    def test_reset(self, machine):
        machine.execute_set(Register.AX, "1234")
        machine.execute_push(Register.AX)
        machine.execute_mov(AX, M_BASE)
        machine.reset()
        view = machine.view()
        assert set(view.registers.values()) == {"0000"}
        assert view.memory == {}
        assert view.stack == []

    def test_register_layout(self, machine):
        layout = machine.get_register_layout()
        names = [info.name for group in layout for info in group.registers]
        assert names == ["AX", "BX", "CX", "DX", "BP", "SI", "DI"]
        assert all(info.width == 16 for group in layout for info in group.registers)


class TestSet:
    # @intent:test_case_set_pad "A1"の代入は"00A1"になることを全レジスタについて検証します。
    @pytest.mark.parametrize("register", list(Register))
    def test_set_pads(self, machine, register):
        machine.execute_set(register, "A1")
        assert machine.get_register_map()[register.value] == "00A1"

    def test_set_lowercase(self, machine):
        machine.execute_set(Register.DX, "beef")
        assert machine.read_register(Register.DX) == 0xBEEF

    # @intent:test_case_set_invalid 不正な入力はInvalidHexInputErrorとなり、レジスタは変化しないことを検証します。
    @pytest.mark.parametrize("raw", ["ZZ", "", "12345", "G"])
    def test_set_invalid_leaves_register(self, machine, raw):
        machine.execute_set(Register.AX, "0042")
        with pytest.raises(InvalidHexInputError):
            machine.execute_set(Register.AX, raw)
        assert machine.get_register_map()["AX"] == "0042"

    def test_set_rejects_memory_operand(self, machine):
        with pytest.raises(InvalidOperandError):
            machine.execute_set(M_BASE, "1")

    def test_set_snapshot(self, machine):
        snapshot = machine.execute_set(Register.CX, "f")
        assert snapshot.operation.mnemonic == "SET"
        assert snapshot.operation.operands == ["CX", "000F"]
        assert snapshot.state.cx == 0x000F


class TestMov:
    # @intent:test_case_mov_reg_reg MOV AX->BX はAXを変えず、BXにAXの値をコピーすることを検証します。
    def test_register_to_register(self, machine):
        machine.execute_set(Register.AX, "1234")
        machine.execute_set(Register.BX, "5678")
        machine.execute_mov(AX, BX)
        assert machine.read_register(Register.AX) == 0x1234
        assert machine.read_register(Register.BX) == 0x1234

    # @intent:test_case_mov_scenario BX=0010, SI=0005, offset=0002 のbase-indexでmemory[0017]に書き込まれることを検証します。
    def test_register_to_memory_base_index(self, machine):
        machine.execute_set(Register.BX, "0010")
        machine.execute_set(Register.SI, "0005")
        snapshot = machine.execute_mov(AX, M_BASE_INDEX, offset="0002")
        assert machine.get_memory_map() == {"0017": "0000"}
        assert snapshot.written_addresses() == [0x0017]
        assert snapshot.operation.operands == ["[BX+SI+0002]", "AX"]

    def test_memory_to_register(self, machine):
        machine.execute_set(Register.SI, "0020")
        machine.execute_set(Register.AX, "ABCD")
        machine.execute_mov(AX, M_INDEX, offset="1")
        machine.execute_mov(M_INDEX, CX, offset="1")
        assert machine.get_register_map()["CX"] == "ABCD"

    # @intent:test_case_mov_zero_default 未書き込みのアドレスからの読み込みは0000であり、エントリは生成されないことを検証します。
    def test_memory_read_defaults_to_zero(self, machine):
        machine.execute_set(Register.CX, "FFFF")
        snapshot = machine.execute_mov(M_BASE, CX, offset="0300")
        assert machine.read_register(Register.CX) == 0
        assert machine.get_memory_map() == {}
        assert [a.access_type for a in snapshot.memory_activity] == [MemoryAccessType.READ]

    # @intent:test_case_mov_mem_mem メモリ同士のMOVはソースを読んでからデスティネーションへ書き込むことを検証します。
    def test_memory_to_memory(self, machine):
        machine.execute_set(Register.BX, "0100")
        machine.execute_set(Register.SI, "0200")
        machine.execute_set(Register.AX, "7777")
        machine.execute_mov(AX, M_BASE)
        machine.execute_mov(M_BASE, M_INDEX)
        assert machine.get_memory_map() == {"0100": "7777", "0200": "7777"}

    # @intent:test_case_mov_address_before_write BXを書き換えるMOVでも、アドレスは書き込み前のBXで解決されることを検証します。
    def test_address_resolved_before_write(self, machine):
        machine.execute_set(Register.AX, "0500")
        machine.execute_mov(AX, M_BASE)  # memory[0000] = 0500
        machine.execute_mov(M_BASE, BX)
        assert machine.read_register(Register.BX) == 0x0500

    def test_offset_wraps(self, machine):
        machine.execute_set(Register.BX, "FFFF")
        machine.execute_set(Register.AX, "0001")
        machine.execute_mov(AX, M_BASE, offset="0002")
        assert machine.get_memory_map() == {"0001": "0001"}

    def test_int_offset(self, machine):
        machine.execute_mov(AX, M_INDEX, offset=0x10)
        assert "0010" in machine.get_memory_map()

    # @intent:test_case_mov_invalid_offset 不正なオフセットはInvalidHexInputErrorとなり、メモリは変化しないことを検証します。
    def test_invalid_offset_rejected(self, machine):
        with pytest.raises(InvalidHexInputError):
            machine.execute_mov(AX, M_BASE, offset="XYZ")
        assert machine.get_memory_map() == {}

    def test_invalid_operand(self, machine):
        with pytest.raises(InvalidOperandError):
            machine.execute_mov("AX", BX)

    def test_accepts_bare_register(self, machine):
        machine.execute_set(Register.AX, "0009")
        machine.execute_mov(Register.AX, Register.DI)
        assert machine.read_register(Register.DI) == 9


class TestXchg:
    def test_register_swap(self, machine):
        machine.execute_set(Register.AX, "1111")
        machine.execute_set(Register.BX, "2222")
        machine.execute_xchg(AX, BX)
        assert machine.get_register_map()["AX"] == "2222"
        assert machine.get_register_map()["BX"] == "1111"

    # @intent:test_case_xchg_self 同一レジスタとの交換は状態を変えないことを検証します。
    def test_same_register_is_noop(self, machine):
        machine.execute_set(Register.AX, "1234")
        before = machine.view()
        machine.execute_xchg(AX, AX)
        assert machine.view() == before

    def test_register_memory_swap(self, machine):
        machine.execute_set(Register.AX, "00AA")
        machine.execute_mov(AX, M_BASE)          # memory[0000] = 00AA
        machine.execute_set(Register.AX, "00BB")
        machine.execute_xchg(AX, M_BASE)
        assert machine.get_register_map()["AX"] == "00AA"
        assert machine.get_memory_map() == {"0000": "00BB"}

    # @intent:test_case_xchg_memory_source メモリがソース側でも同じ交換が行われることを検証します。
    def test_memory_register_swap(self, machine):
        machine.execute_set(Register.SI, "0004")
        machine.execute_set(Register.DX, "CAFE")
        machine.execute_xchg(M_INDEX, DX_OPERAND)
        assert machine.read_register(Register.DX) == 0
        assert machine.get_memory_map() == {"0004": "CAFE"}

    def test_memory_memory_swap(self, machine):
        machine.execute_set(Register.BX, "0010")
        machine.execute_set(Register.SI, "0020")
        machine.execute_set(Register.AX, "0001")
        machine.execute_mov(AX, M_BASE)
        machine.execute_set(Register.AX, "0002")
        machine.execute_mov(AX, M_INDEX)
        machine.execute_xchg(M_BASE, M_INDEX)
        assert machine.get_memory_map() == {"0010": "0002", "0020": "0001"}

    # @intent:test_case_xchg_same_address 同一アドレスに解決されるメモリ同士の交換は何もせず、エントリも生成しないことを検証します。
    def test_memory_same_address_is_noop(self, machine):
        machine.execute_set(Register.BX, "0030")
        machine.execute_set(Register.SI, "0030")
        machine.execute_xchg(M_BASE, M_INDEX, offset="1")
        assert machine.get_memory_map() == {}

    def test_xchg_with_bx_uses_prior_address(self, machine):
        machine.execute_set(Register.BX, "0040")
        machine.execute_xchg(BX, M_BASE)
        assert machine.read_register(Register.BX) == 0
        assert machine.get_memory_map() == {"0040": "0040"}


class TestStack:
    # @intent:test_case_push_pop PUSH→POPで同じ値が戻り、スタックが空になることを検証します。
    def test_push_then_pop(self, machine):
        machine.execute_set(Register.AX, "4321")
        machine.execute_push(Register.AX)
        machine.execute_pop(Register.DX)
        assert machine.read_register(Register.DX) == 0x4321
        assert machine.get_stack() == []

    # @intent:test_case_lifo AX(0001), BX(0002)の順にPUSHし、CXへPOPするとCX=0002, スタック=["0001"]になることを検証します。
    def test_lifo_order(self, machine):
        machine.execute_set(Register.AX, "0001")
        machine.execute_set(Register.BX, "0002")
        machine.execute_push(Register.AX)
        machine.execute_push(Register.BX)
        assert machine.get_stack() == ["0002", "0001"]
        machine.execute_pop(Register.CX)
        assert machine.get_register_map()["CX"] == "0002"
        assert machine.get_stack() == ["0001"]

    # @intent:test_case_pop_empty 空のスタックからのPOPはEmptyStackErrorとなり、状態が変化しないことを検証します。
    def test_pop_empty(self, machine):
        machine.execute_set(Register.CX, "0101")
        before = machine.view()
        with pytest.raises(EmptyStackError):
            machine.execute_pop(Register.CX)
        assert machine.view() == before

    def test_push_is_unbounded(self, machine):
        for _ in range(1000):
            machine.execute_push(Register.AX)
        assert len(machine.get_stack()) == 1000

    def test_snapshot_stack_is_copy(self, machine):
        snapshot = machine.execute_push(Register.AX)
        machine.execute_push(Register.AX)
        assert snapshot.stack == (0,)
        assert snapshot.metadata.sequence == 1

