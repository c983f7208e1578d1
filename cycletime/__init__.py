"""
cycletime Python Package

Machining cycle-time estimation from ISO G-code for turning centers (lathe)
and machining centers (mill).

Key components:
- estimate: Program text -> seconds in one call
- parse / expand / compute_time: The pipeline stages
- integrate: Per-move-type time breakdown
"""

from . import config
from ._version import __version__
from .estimator import compute_time, estimate, expand, integrate, parse
from .gcode.commands import InvalidMachineClassError, MachineClass
from .gcode.cycles import DrillPolicy

__all__ = [
    "__version__",
    "config",
    "compute_time",
    "estimate",
    "expand",
    "integrate",
    "parse",
    "DrillPolicy",
    "InvalidMachineClassError",
    "MachineClass",
]
