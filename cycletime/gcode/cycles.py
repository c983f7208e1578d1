"""
Parametric machining cycles

- DrillCycle: Siemens CYCLE81..89 drilling, five primitive moves per hole
- ThreadingCycle: two-block G76 lathe threading, multiple axial passes
"""

import math
from dataclasses import dataclass
from enum import Enum

from ..config import THREAD_DEPTH_SCALE
from .commands import Command, MotionCode


class DrillPolicy(Enum):
    """How long a modal drill call (MCALL CYCLE8x) stays active"""

    ONE_SHOT = "one-shot"  # closes after the first position
    MODAL = "modal"  # stays until MCALL or a new call

    @classmethod
    def from_name(cls, name: "str | DrillPolicy") -> "DrillPolicy":
        if isinstance(name, DrillPolicy):
            return name
        key = str(name).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown drill policy: {name!r} (expected 'one-shot' or 'modal')")


@dataclass
class DrillCycle:
    """Active drilling call: retract plane, reference plane, safety distance, final depth"""

    approach: float
    plane: float
    safety: float
    depth: float
    name: str = "CYCLE81"
    passes: int = 0

    @classmethod
    def from_call(cls, name: str, args: tuple[float, ...]) -> "DrillCycle":
        values = list(args[:4]) + [0.0] * max(0, 4 - len(args))
        return cls(approach=values[0], plane=values[1], safety=values[2], depth=values[3], name=name)

    def expand(self, template: Command) -> list[Command]:
        """
        Primitive moves drilling one hole

        Args:
            template: The positioning block (its X/Y target, modes and F)

        Returns:
            rapid Z approach, rapid XY, rapid Z plane+safety,
            linear Z depth, rapid Z approach
        """
        target = {axis: template.params[axis] for axis in ("X", "Y") if axis in template.params}
        if "F" in template.params:
            target["F"] = template.params["F"]

        steps = [
            (MotionCode.RAPID, {"Z": self.approach}, False),
            (MotionCode.RAPID, target, template.incremental),
            (MotionCode.RAPID, {"Z": self.plane + self.safety}, False),
            (MotionCode.LINEAR, {"Z": self.depth}, False),
            (MotionCode.RAPID, {"Z": self.approach}, False),
        ]

        primitives = []
        for motion, params, incremental in steps:
            primitive = template.derive(
                opcode=motion.value,
                codes=(motion.value,),
                params=dict(params),
                expressions={},
                motion=motion,
                incremental=incremental,
                cycle=None,
                modal_call=False,
            )
            primitive.text = str(primitive)
            primitives.append(primitive)

        self.passes += 1
        return primitives


@dataclass(frozen=True)
class ThreadingConvention:
    """Which G76 words carry which depth, and their unit scale to mm"""

    finish_slot: str = "Q"  # first block
    total_slot: str = "P"  # second block
    step_slot: str = "Q"  # second block
    depth_scale: float = THREAD_DEPTH_SCALE  # um -> mm


@dataclass
class ThreadingCycle:
    """
    G76 threading in two blocks

    The first block (no X/Z) sets the finishing depth, the second sets the
    total depth and per-pass step and triggers the cut. Depths are in mm.
    """

    finish_depth: float = 0.0
    total_depth: float = 0.0
    step_depth: float = 0.0
    passes: int = 0

    @staticmethod
    def is_cutting_block(command: Command) -> bool:
        return "X" in command.params or "Z" in command.params

    def set_finish(self, command: Command, convention: ThreadingConvention) -> None:
        if convention.finish_slot in command.params:
            self.finish_depth = command.params[convention.finish_slot] * convention.depth_scale

    def set_depths(self, command: Command, convention: ThreadingConvention) -> int:
        """Read total and step depth from the cutting block; returns the pass count"""
        self.total_depth = command.params.get(convention.total_slot, 0.0) * convention.depth_scale
        self.step_depth = command.params.get(convention.step_slot, 0.0) * convention.depth_scale
        self.passes = self.pass_count(self.total_depth, self.step_depth)
        return self.passes

    @staticmethod
    def pass_count(total_depth: float, step_depth: float) -> int:
        """Roughing passes needed to reach ``total_depth`` plus one finishing pass"""
        if total_depth <= 0:
            rough = 0
        elif step_depth <= 0:
            rough = 1
        else:
            rough = math.ceil(round(total_depth / step_depth, 9))
        return rough + 1

    def minutes(self, axial_travel: float, feed_per_minute: float) -> float:
        """Cutting time of every pass over ``axial_travel`` mm"""
        if feed_per_minute <= 0 or self.passes <= 0:
            return 0.0
        return abs(axial_travel) * self.passes / feed_per_minute
