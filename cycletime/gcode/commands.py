"""
Block types produced by the parser.

A program is a list of blocks. ``Command`` is the only block that moves the
machine; the remaining types are mill control records (labels, register
assignments, conditional jumps and repeats) consumed by the expander.

Parameters are a ``dict`` keyed by address letter: a missing key means
"keep the previous value", a present ``0.0`` means "go to zero".
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union


class InvalidMachineClassError(ValueError):
    """Raised for a machine-class selector other than lathe or mill."""


class MachineClass(Enum):
    LATHE = "lathe"
    MILL = "mill"

    @classmethod
    def from_selector(cls, selector: "str | MachineClass") -> "MachineClass":
        """
        Resolve a caller-supplied selector

        Args:
            selector: "lathe", "mill" (case-insensitive) or a MachineClass

        Returns:
            The matching MachineClass

        Raises:
            InvalidMachineClassError: for any other selector
        """
        if isinstance(selector, MachineClass):
            return selector
        if isinstance(selector, str):
            key = selector.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise InvalidMachineClassError(
            f"Unknown machine class: {selector!r} (expected 'lathe' or 'mill')"
        )


class MotionCode(Enum):
    RAPID = "G0"
    LINEAR = "G1"
    ARC_CW = "G2"
    ARC_CCW = "G3"
    DWELL = "G4"
    NONE = "none"

    @property
    def is_arc(self) -> bool:
        return self in (MotionCode.ARC_CW, MotionCode.ARC_CCW)


class FeedMode(Enum):
    PER_REVOLUTION = "per-rev"  # mm/rev
    PER_MINUTE = "per-min"  # mm/min


class SpindleMode(Enum):
    CONSTANT_RPM = "G97"
    CONSTANT_SURFACE_SPEED = "G96"


@dataclass
class Command:
    """One normalized, modally annotated G-code block"""

    opcode: str | None  # primary code ("G1", "M3", "T0101", "MCALL") or None
    machine: MachineClass | None = None  # set by the parser
    codes: tuple[str, ...] = ()  # every G/M/T word on the block, opcode first
    params: dict[str, float] = field(default_factory=dict)
    motion: MotionCode = MotionCode.NONE
    feed_mode: FeedMode = FeedMode.PER_MINUTE
    spindle_mode: SpindleMode = SpindleMode.CONSTANT_RPM
    rotary_engaged: bool = False
    plane: str = "G17"
    incremental: bool = False
    expressions: dict[str, str] = field(default_factory=dict)  # X=R1+2 words
    cycle: tuple[str, tuple[float, ...]] | None = None  # drill call name and args
    modal_call: bool = False  # cycle came from MCALL
    text: str = ""
    line_number: int | None = None

    def has(self, *codes: str) -> bool:
        """True when any of ``codes`` appears on the block"""
        return any(code in self.codes for code in codes)

    def derive(self, **changes) -> "Command":
        """Copy of this command with fresh containers and ``changes`` applied"""
        changes.setdefault("params", dict(self.params))
        changes.setdefault("expressions", dict(self.expressions))
        return replace(self, **changes)

    def __str__(self):
        words = list(self.codes)
        for key, val in self.params.items():
            words.append(f"{key}{val:.10g}")
        return " ".join(words)


@dataclass(frozen=True)
class Label:
    name: str
    line_number: int | None = None


@dataclass(frozen=True)
class Assignment:
    register: str  # "R1"
    expression: str
    line_number: int | None = None


@dataclass(frozen=True)
class Branch:
    register: str
    operator: str  # one of >=, <=, ==, >, <
    value: float
    target: str
    line_number: int | None = None


@dataclass(frozen=True)
class Repeat:
    label: str
    count: int
    line_number: int | None = None


Block = Union[Command, Label, Assignment, Branch, Repeat]
