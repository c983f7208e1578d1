"""
Mill program expansion

Resolves control flow (labels, R-parameter assignments, IF ... GOTO jumps,
REPEAT ranges) and drill cycles into a flat list of primitive commands for
the time integrator.
"""

import logging

from .. import config
from .commands import Assignment, Block, Branch, Command, Label, MotionCode, Repeat
from .cycles import DrillCycle, DrillPolicy
from .expressions import ExpressionError, evaluate
from .state import RegisterBank

logger = logging.getLogger(__name__)

COMPARATORS = {
    ">=": lambda a, b: a >= b,
    "<=": lambda a, b: a <= b,
    "==": lambda a, b: a == b,
    "=": lambda a, b: a == b,
    ">": lambda a, b: a > b,
    "<": lambda a, b: a < b,
}

PROGRAM_END_CODES = ("M2", "M30")


class ProgramExpander:
    """Walks a parsed mill program with an explicit instruction pointer"""

    def __init__(self, drill_policy: DrillPolicy | str | None = None,
                 end_label: str | None = None,
                 max_steps: int | None = None):
        """
        Args:
            drill_policy: One-shot or modal drill calls (config default)
            end_label: Sentinel label closing REPEAT ranges
            max_steps: Instruction-pointer budget guarding endless GOTO loops
        """
        self.drill_policy = DrillPolicy.from_name(drill_policy or config.DRILL_POLICY_DEFAULT)
        self.end_label = (end_label or config.REPEAT_END_LABEL).upper()
        self.max_steps = max_steps if max_steps is not None else config.MAX_EXPANSION_STEPS

        self.registers = RegisterBank()
        self.cycle: DrillCycle | None = None
        self.output: list[Command] = []

    @staticmethod
    def index_labels(blocks: list[Block]) -> dict[str, int]:
        """Label name -> block index; the first definition wins"""
        labels: dict[str, int] = {}
        for index, block in enumerate(blocks):
            if isinstance(block, Label) and block.name not in labels:
                labels[block.name] = index
        return labels

    def expand(self, blocks: list[Block]) -> list[Command]:
        """
        Expand a parsed program

        Args:
            blocks: Output of the mill parser

        Returns:
            Primitive commands in execution order
        """
        self.registers = RegisterBank()
        self.cycle = None
        self.output = []
        labels = self.index_labels(blocks)

        pointer = 0
        steps = 0
        while pointer < len(blocks):
            steps += 1
            if steps > self.max_steps:
                logger.warning(
                    f"Expansion stopped after {self.max_steps} steps at block {pointer}; "
                    "check for a jump loop that never exits"
                )
                break

            block = blocks[pointer]

            if isinstance(block, Label):
                pointer += 1

            elif isinstance(block, Assignment):
                self._assign(block)
                pointer += 1

            elif isinstance(block, Branch):
                pointer = self._branch(block, labels, pointer)

            elif isinstance(block, Repeat):
                self._repeat(block, blocks, labels)
                pointer += 1

            else:
                if block.has(*PROGRAM_END_CODES):
                    self._emit(block)
                    break
                self._emit(block)
                pointer += 1

        logger.debug(f"Expanded {len(blocks)} blocks into {len(self.output)} commands")
        return self.output

    def _assign(self, block: Assignment) -> None:
        try:
            self.registers[block.register] = evaluate(block.expression, self.registers.values)
        except ExpressionError as e:
            logger.warning(f"Line {block.line_number}: skipping {block.register}={block.expression} - {e}")

    def _branch(self, block: Branch, labels: dict[str, int], pointer: int) -> int:
        taken = COMPARATORS[block.operator](self.registers[block.register], block.value)
        if not taken:
            return pointer + 1
        if block.target not in labels:
            logger.warning(f"Line {block.line_number}: jump target {block.target} not found")
            return pointer + 1
        return labels[block.target]

    def _repeat(self, block: Repeat, blocks: list[Block], labels: dict[str, int]) -> None:
        if block.label not in labels:
            logger.warning(f"Line {block.line_number}: repeat label {block.label} not found")
            return
        start = labels[block.label]
        end = labels.get(self.end_label, len(blocks))
        body = [b for b in blocks[start:end] if isinstance(b, Command)]
        for _ in range(max(0, block.count)):
            for command in body:
                self._emit(command)

    def _emit(self, command: Command) -> None:
        """Route one command through cycle handling into the output"""
        if command.expressions:
            command = self._resolve_expressions(command)

        if command.cycle is not None:
            name, args = command.cycle
            cycle = DrillCycle.from_call(name, args)
            if command.modal_call:
                self.cycle = cycle
            else:
                self.output.extend(cycle.expand(command.derive(params={})))
            return

        if command.opcode == "MCALL":
            self.cycle = None
            return

        if self.cycle is not None and self._is_drill_position(command):
            self.output.extend(self.cycle.expand(command))
            if self.drill_policy is DrillPolicy.ONE_SHOT:
                self.cycle = None
            return

        self.output.append(command)

    @staticmethod
    def _is_drill_position(command: Command) -> bool:
        if command.opcode not in (None, "G0", "G1"):
            return False
        if command.motion not in (MotionCode.RAPID, MotionCode.LINEAR):
            return False
        return "X" in command.params or "Y" in command.params

    def _resolve_expressions(self, command: Command) -> Command:
        resolved = command.derive(expressions={})
        for key, text in command.expressions.items():
            try:
                resolved.params[key] = evaluate(text, self.registers.values)
            except ExpressionError as e:
                logger.warning(f"Line {command.line_number}: dropping {key}={text} - {e}")
        return resolved
