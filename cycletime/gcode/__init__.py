"""
GCODE interpretation for cycle-time estimation

Main components:
- parser.py: Line normalization and tokenizing
- state.py: Modal state tracking and machine position
- commands.py: Block types
- expressions.py: R-parameter arithmetic
- cycles.py: Drill and threading cycles
- expander.py: Mill control flow and cycle expansion
- utils.py: Arc geometry and rate conversions
- interpreter.py: Lathe and mill time integrators
"""

from .commands import (
    Assignment,
    Block,
    Branch,
    Command,
    FeedMode,
    InvalidMachineClassError,
    Label,
    MachineClass,
    MotionCode,
    Repeat,
    SpindleMode,
)
from .cycles import DrillCycle, DrillPolicy, ThreadingConvention, ThreadingCycle
from .expander import ProgramExpander
from .expressions import ExpressionError, evaluate
from .interpreter import LatheTimeIntegrator, MillTimeIntegrator, TimeBreakdown, TimeIntegrator
from .parser import GcodeParser
from .state import MachinePosition, ModalState, RegisterBank

__all__ = [
    "Assignment",
    "Block",
    "Branch",
    "Command",
    "DrillCycle",
    "DrillPolicy",
    "ExpressionError",
    "FeedMode",
    "GcodeParser",
    "InvalidMachineClassError",
    "Label",
    "LatheTimeIntegrator",
    "MachineClass",
    "MachinePosition",
    "MillTimeIntegrator",
    "ModalState",
    "MotionCode",
    "ProgramExpander",
    "RegisterBank",
    "Repeat",
    "SpindleMode",
    "ThreadingConvention",
    "ThreadingCycle",
    "TimeBreakdown",
    "TimeIntegrator",
    "evaluate",
]
