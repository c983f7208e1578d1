"""
GCODE Parser

Normalizes raw ISO lines (comments, block numbers, zero-padded codes) and
tokenizes them into blocks. A ``ModalState`` is threaded through the
program so every ``Command`` carries the modes it inherits.

Parsing is tolerant: empty lines produce nothing and a word whose numeric
part does not parse is dropped without aborting the block.
"""

import logging
import re

from ..config import TRACE
from .commands import (
    Assignment,
    Block,
    Branch,
    Command,
    Label,
    MachineClass,
    Repeat,
)
from .state import ModalState

logger = logging.getLogger(__name__)


def canonical_code(letter: str, digits: str) -> str:
    """
    Zero-strip a G/M code number ("G01" -> "G1", "M03" -> "M3")

    T words keep their digits since they encode tool and offset numbers.
    """
    if letter == "T":
        return f"T{digits}"
    number = float(digits)
    if number.is_integer():
        return f"{letter}{int(number)}"
    return f"{letter}{number:g}"


class GcodeParser:
    """Turns program text into a list of modally annotated blocks"""

    # ";" or "(" runs to end of line, except the "(" opening a CYCLE8x argument list
    COMMENT_PATTERN = re.compile(r";.*$|(?<!CYCLE8\d)\(.*$")
    BLOCK_NUMBER_PATTERN = re.compile(r"^[NO]\d+\s*")
    CODE_PATTERN = re.compile(r"^([GMT])(\d+(?:\.\d+)?)$")
    WORD_PATTERN = re.compile(r"^([A-Z])(.*)$")
    NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)$")
    EXPRESSION_WORD_PATTERN = re.compile(r"^([A-Z])=(.+)$")

    # Mill control directives
    LABEL_PATTERN = re.compile(r"^([A-Z_]\w*):$")
    ASSIGN_PATTERN = re.compile(r"^(R\d+)\s*=\s*(.+)$")
    BRANCH_PATTERN = re.compile(
        r"^IF\s+(R\d+)\s*(>=|<=|==|=|>|<)\s*([+-]?(?:\d+\.?\d*|\.\d+))\s+GOTO[BF]?\s+([A-Z_]\w*)$"
    )
    REPEAT_PATTERN = re.compile(r"^REPEAT\s+([A-Z_]\w*)\s+P\s*=\s*(\d+)$")
    CYCLE_PATTERN = re.compile(r"^(MCALL\s+)?(CYCLE8[1-9])\(([^)]*)\)")
    CYCLE_CLOSE_PATTERN = re.compile(r"^MCALL$")

    def __init__(self, machine: MachineClass | str = MachineClass.LATHE):
        self.machine = MachineClass.from_selector(machine)
        self.line_count = 0
        self.warnings: list[str] = []

    def normalize_line(self, line: str) -> str | None:
        """
        Strip the trailing comment and block number, uppercase the rest

        Returns:
            The normalized text, or None when nothing is left
        """
        line = self.COMMENT_PATTERN.sub("", line.upper()).strip()
        line = self.BLOCK_NUMBER_PATTERN.sub("", line).strip()
        if not line or line == "%":
            return None
        return line

    def tokenize(self, text: str) -> tuple[list[str], dict[str, float], dict[str, str]]:
        """
        Split a normalized line into codes, numeric words and expression words

        Args:
            text: Output of ``normalize_line``

        Returns:
            (codes, params, expressions)
        """
        codes: list[str] = []
        params: dict[str, float] = {}
        expressions: dict[str, str] = {}

        for token in text.split():
            code_match = self.CODE_PATTERN.match(token)
            if code_match:
                codes.append(canonical_code(code_match.group(1), code_match.group(2)))
                continue

            word_match = self.WORD_PATTERN.match(token)
            if not word_match:
                self._drop(token, "not an address word")
                continue
            key, literal = word_match.groups()

            if self.NUMBER_PATTERN.match(literal):
                params[key] = float(literal)
                continue

            expr_match = self.EXPRESSION_WORD_PATTERN.match(token)
            if expr_match and self.machine is MachineClass.MILL:
                value = expr_match.group(2)
                if self.NUMBER_PATTERN.match(value):
                    params[key] = float(value)
                else:
                    expressions[key] = value
                continue

            self._drop(token, "numeric suffix does not parse")

        return codes, params, expressions

    def parse_line(self, line: str, state: ModalState) -> Block | None:
        """
        Parse a single line of GCODE

        Args:
            line: Raw line
            state: Modal state of the program, updated in place

        Returns:
            The parsed block, or None for empty lines
        """
        self.line_count += 1
        text = self.normalize_line(line)
        if text is None:
            return None

        if self.machine is MachineClass.MILL:
            directive = self._parse_directive(text)
            if isinstance(directive, Command):
                return state.apply(directive)
            if directive is not None:
                return directive

        codes, params, expressions = self.tokenize(text)
        command = Command(
            opcode=codes[0] if codes else None,
            codes=tuple(codes),
            params=params,
            expressions=expressions,
            text=text,
            line_number=self.line_count,
        )
        return state.apply(command)

    def _parse_directive(self, text: str) -> Block | None:
        line_number = self.line_count

        match = self.LABEL_PATTERN.match(text)
        if match:
            return Label(match.group(1), line_number)

        match = self.ASSIGN_PATTERN.match(text)
        if match:
            return Assignment(match.group(1), match.group(2).strip(), line_number)

        match = self.BRANCH_PATTERN.match(text)
        if match:
            register, operator, value, target = match.groups()
            return Branch(register, operator, float(value), target, line_number)

        match = self.REPEAT_PATTERN.match(text)
        if match:
            return Repeat(match.group(1), int(match.group(2)), line_number)

        match = self.CYCLE_PATTERN.match(text)
        if match:
            modal, name, raw_args = match.groups()
            args = tuple(self._cycle_argument(arg) for arg in raw_args.split(","))
            return Command(
                opcode=name,
                codes=(name,),
                cycle=(name, args),
                modal_call=modal is not None,
                text=text,
                line_number=line_number,
            )

        if self.CYCLE_CLOSE_PATTERN.match(text):
            return Command(opcode="MCALL", codes=("MCALL",), text=text, line_number=line_number)

        return None

    def _cycle_argument(self, raw: str) -> float:
        raw = raw.strip()
        if self.NUMBER_PATTERN.match(raw):
            return float(raw)
        if raw:
            self._drop(raw, "cycle argument is not numeric, reading 0")
        return 0.0

    def _drop(self, token: str, reason: str) -> None:
        message = f"Line {self.line_count}: dropped {token!r} ({reason})"
        self.warnings.append(message)
        logger.log(TRACE, message)

    def parse_program(self, program: str | list[str]) -> list[Block]:
        """
        Parse a complete GCODE program

        Args:
            program: Either a string with newlines or a list of lines

        Returns:
            List of blocks in program order
        """
        if isinstance(program, str):
            lines = program.splitlines()
        else:
            lines = program

        self.warnings = []
        self.line_count = 0
        state = ModalState.for_machine(self.machine)

        blocks: list[Block] = []
        for line in lines:
            block = self.parse_line(line, state)
            if block is not None:
                blocks.append(block)

        logger.debug(
            f"Parsed {len(blocks)} {self.machine.value} blocks "
            f"from {self.line_count} lines ({len(self.warnings)} dropped words)"
        )
        return blocks

    def get_warnings(self) -> list[str]:
        """Get list of dropped-word diagnostics from the last parse"""
        return self.warnings
