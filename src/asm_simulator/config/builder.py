from asm_simulator.core.machine import MachineState
from asm_simulator.session.session import Session
from .models import MachineConfig

# @intent:responsibility 構成（Config）に基づいてMachineStateとSessionを生成し、初期状態を適用します。
class MachineBuilder:
    def build_machine(self, config: MachineConfig) -> MachineState:
        machine = MachineState()
        self.apply_initial_state(machine, config)
        return machine

    def build_session(self, config: MachineConfig) -> Session:
        # 初期状態を適用した後にSessionを生成し、取り消しの起点とする
        machine = self.build_machine(config)
        return Session(machine, history_limit=config.history_limit)

    # @intent:responsibility Configで定義された初期状態をマシンに適用します。
    # @intent:rationale 初期化はアクセスログに残らないバックドア経由で行い、最初の操作のSnapshotに混入させません。
    def apply_initial_state(self, machine: MachineState, config: MachineConfig) -> None:
        """
        マシンをリセットし、Configから指定された初期値を適用します。
        """
        machine.reset()

        for register, value in config.registers.items():
            machine.load_register(register, value)

        for address, value in config.memory.items():
            machine.load_memory(address, value)

        machine.get_stack_store().replace(config.stack)
