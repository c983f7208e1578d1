"""
Time integration for lathe and mill programs

Walks a primitive command stream in order, tracking position, feed,
spindle speed and RPM ceiling, and accumulates elapsed minutes per move
type. Degenerate input (zero feed, zero radius, unknown codes) contributes
no time instead of raising.
"""

import logging
import math
from dataclasses import dataclass, fields

import numpy as np

from .. import config
from ..config import TRACE
from .commands import Command, FeedMode, MachineClass, MotionCode, SpindleMode
from .cycles import ThreadingConvention, ThreadingCycle
from .state import MachinePosition
from .utils import (
    arc_length,
    calculate_distance,
    clamp_rpm,
    css_rpm,
    feed_to_minutes,
    ijk_to_center,
    plane_axes,
    radius_arc_length,
    rotary_arc_length,
    shortest_angle,
)

logger = logging.getLogger(__name__)

DWELL_SECONDS_KEYS = ("P", "F", "U")
RPM_LIMIT_CODES = ("G50", "G92")
SPINDLE_START_CODES = ("M3", "M4")


@dataclass
class TimeBreakdown:
    """Elapsed minutes per move type"""

    rapid: float = 0.0
    feed: float = 0.0
    arc: float = 0.0
    dwell: float = 0.0
    rotary: float = 0.0
    threading: float = 0.0
    blocks: int = 0

    def add(self, kind: str, minutes: float) -> None:
        """Accumulate ``minutes``; negative or non-finite amounts count as zero"""
        if minutes > 0 and np.isfinite(minutes):
            setattr(self, kind, getattr(self, kind) + minutes)

    @property
    def total_minutes(self) -> float:
        return self.rapid + self.feed + self.arc + self.dwell + self.rotary + self.threading

    @property
    def total_seconds(self) -> float:
        return self.total_minutes * 60.0

    def as_seconds(self) -> dict[str, float]:
        """Per-type times in seconds, for reporting"""
        return {f.name: getattr(self, f.name) * 60.0 for f in fields(self) if f.name != "blocks"}


class TimeIntegrator:
    """Shared integration loop; subclasses supply the axis model"""

    machine: MachineClass

    def __init__(self, rpm_ceiling: float | None = None, rapid_rate: float | None = None):
        """
        Args:
            rpm_ceiling: Caller maximum spindle speed; config default when None
            rapid_rate: G0 traverse rate in mm/min; config default when None
        """
        self.max_rpm = rpm_ceiling
        self.rapid_rate = rapid_rate if rapid_rate is not None else config.RAPID_RATE_MM_MIN
        self.reset()

    def reset(self) -> None:
        """Fresh machine state; every integrate() call starts here"""
        self.position = MachinePosition()
        self.feed = 0.0
        self.rpm = 0.0
        self.surface_speed = 0.0
        self.spindle_running = True
        self.rpm_ceiling = self.max_rpm if self.max_rpm is not None else config.DEFAULT_RPM_CEILING
        self.breakdown = TimeBreakdown()

    def integrate(self, commands: list[Command]) -> TimeBreakdown:
        """
        Integrate a command stream

        Args:
            commands: Primitive commands (parsed lathe program, expanded mill program)

        Returns:
            Per-type elapsed time
        """
        self.reset()
        for command in commands:
            self.step(command)
        logger.debug(
            f"{self.machine.value}: {self.breakdown.blocks} blocks, "
            f"{self.breakdown.total_seconds:.1f} s"
        )
        return self.breakdown

    def compute_time(self, commands: list[Command]) -> float:
        """Total time of ``commands`` in seconds"""
        return self.integrate(commands).total_seconds

    def step(self, command: Command) -> None:
        self.breakdown.blocks += 1

        if self.is_tool_change(command):
            return

        if command.motion is MotionCode.DWELL:
            self.dwell(command)
            return

        self.apply_rpm_limit(command)
        if "F" in command.params:
            self.feed = command.params["F"]
        self.apply_spindle(command)

        if self.handle_cycle(command):
            return

        if command.motion is MotionCode.RAPID:
            self.rapid(command)
        elif command.motion is MotionCode.LINEAR:
            self.linear(command)
        elif command.motion.is_arc:
            self.arc(command)
        elif command.opcode is not None:
            logger.log(TRACE, f"No time for {command.text!r}")

    @staticmethod
    def is_tool_change(command: Command) -> bool:
        opcode = command.opcode or ""
        return opcode.startswith("T") or opcode == "M6" or "L" in command.params

    def apply_rpm_limit(self, command: Command) -> None:
        """Subclass hook for spindle-limit codes"""

    def apply_spindle(self, command: Command) -> None:
        """M5 stops the spindle but keeps the programmed speed for the next M3/M4"""
        if command.has("M5"):
            self.spindle_running = False
        elif command.has(*SPINDLE_START_CODES):
            self.spindle_running = True
        if "S" not in command.params or command.has(*RPM_LIMIT_CODES):
            return
        speed = command.params["S"]
        if command.spindle_mode is SpindleMode.CONSTANT_SURFACE_SPEED:
            self.surface_speed = max(0.0, speed)
        else:
            self.rpm = clamp_rpm(speed, self.rpm_ceiling)

    def feed_per_minute(self, command: Command, rpm: float) -> float:
        if command.feed_mode is FeedMode.PER_REVOLUTION:
            return self.feed * rpm if self.spindle_running else 0.0
        return self.feed

    def dwell(self, command: Command) -> None:
        seconds = next((command.params[k] for k in DWELL_SECONDS_KEYS if k in command.params), 0.0)
        self.breakdown.add("dwell", seconds / 60.0)
        self.position.update(self.target(command))

    def handle_cycle(self, command: Command) -> bool:
        """Subclass hook for inline cycles; True when the block was consumed"""
        return False

    def target(self, command: Command) -> dict[str, float]:
        raise NotImplementedError

    def rapid(self, command: Command) -> None:
        raise NotImplementedError

    def linear(self, command: Command) -> None:
        raise NotImplementedError

    def arc(self, command: Command) -> None:
        raise NotImplementedError


class LatheTimeIntegrator(TimeIntegrator):
    """
    Turning center: X is programmed as a diameter and tracked as a radius,
    Z is axial, C is the spindle axis when engaged (M14).

    Spindle speed follows G96/G97, limited by G50/G92 S; G76 threading is
    expanded here, one block at a time.
    """

    machine = MachineClass.LATHE

    def __init__(self, rpm_ceiling: float | None = None, rapid_rate: float | None = None,
                 threading: ThreadingConvention | None = None):
        self.convention = threading or ThreadingConvention()
        super().__init__(rpm_ceiling, rapid_rate)

    def reset(self) -> None:
        super().reset()
        self.thread: ThreadingCycle | None = None

    def target(self, command: Command) -> dict[str, float]:
        params = command.params
        target = {}
        if "X" in params:
            target["X"] = params["X"] / 2.0
        if "Z" in params:
            target["Z"] = params["Z"]
        if "C" in params:
            target["C"] = params["C"]
        return target

    def apply_rpm_limit(self, command: Command) -> None:
        if not command.has(*RPM_LIMIT_CODES) or "S" not in command.params:
            return
        limit = max(0.0, command.params["S"])
        if self.max_rpm is not None:
            limit = min(limit, self.max_rpm)
        self.rpm_ceiling = limit
        self.rpm = clamp_rpm(self.rpm, self.rpm_ceiling)

    def spindle_rpm(self, command: Command) -> float:
        """Spindle speed for a cut starting at the current radius"""
        if command.spindle_mode is SpindleMode.CONSTANT_SURFACE_SPEED:
            self.rpm = css_rpm(self.surface_speed, self.position.X, self.rpm_ceiling)
        return self.rpm

    def path_length(self, command: Command, end: dict[str, float]) -> float:
        start = self.position
        length = calculate_distance((start.X, start.Z), (end["X"], end["Z"]))
        if command.rotary_engaged and "C" in command.params:
            swept = rotary_arc_length(start.X, end["C"] - start.C)
            length = math.hypot(length, swept)
        return length

    def _end(self, command: Command) -> dict[str, float]:
        end = {"X": self.position.X, "Z": self.position.Z, "C": self.position.C}
        end.update(self.target(command))
        return end

    def rapid(self, command: Command) -> None:
        end = self._end(command)
        self.breakdown.add("rapid", self.path_length(command, end) / self.rapid_rate)
        self.position.update(end)

    def linear(self, command: Command) -> None:
        end = self._end(command)
        rate = self.feed_per_minute(command, self.spindle_rpm(command))
        self.breakdown.add("feed", feed_to_minutes(self.path_length(command, end), rate))
        self.position.update(end)

    def arc(self, command: Command) -> None:
        end = self._end(command)
        params = command.params
        start_pt = (self.position.Z, self.position.X)
        end_pt = (end["Z"], end["X"])

        if "R" in params and "I" not in params and "K" not in params:
            length = radius_arc_length(start_pt, end_pt, params["R"])
        else:
            # I is a diameter-domain offset, K is axial
            center = ijk_to_center(start_pt, (params.get("K", 0.0), params.get("I", 0.0) / 2.0))
            length = arc_length(start_pt, end_pt, center, command.motion is MotionCode.ARC_CW)

        rate = self.feed_per_minute(command, self.spindle_rpm(command))
        self.breakdown.add("arc", feed_to_minutes(length, rate))
        self.position.update(end)

    def handle_cycle(self, command: Command) -> bool:
        if not command.has("G76"):
            return False

        if not ThreadingCycle.is_cutting_block(command):
            # First block opens (or supersedes) the cycle
            self.thread = ThreadingCycle()
            self.thread.set_finish(command, self.convention)
            return True

        thread = self.thread or ThreadingCycle()
        passes = thread.set_depths(command, self.convention)
        travel = command.params.get("Z", self.position.Z) - self.position.Z
        rate = self.feed_per_minute(command, self.spindle_rpm(command))
        self.breakdown.add("threading", thread.minutes(travel, rate))
        logger.debug(f"G76: {passes} passes over {abs(travel):.3f} mm at {rate:.1f} mm/min")
        # Tool returns to the cycle start point
        self.thread = None
        return True


class MillTimeIntegrator(TimeIntegrator):
    """
    Machining center: X/Y/Z linear axes with per-minute feed, arcs in the
    active plane, B as an indexing rotary axis at a fixed angular rate.
    """

    machine = MachineClass.MILL

    def __init__(self, rpm_ceiling: float | None = None, rapid_rate: float | None = None,
                 rotary_rate: float | None = None):
        self.rotary_rate = rotary_rate if rotary_rate is not None else config.ROTARY_RATE_DEG_S
        super().__init__(rpm_ceiling, rapid_rate)

    def target(self, command: Command) -> dict[str, float]:
        target = {}
        for axis in ("X", "Y", "Z"):
            if axis in command.params:
                value = command.params[axis]
                target[axis] = self.position.get(axis) + value if command.incremental else value
        return target

    def _end(self, command: Command) -> dict[str, float]:
        end = {"X": self.position.X, "Y": self.position.Y, "Z": self.position.Z}
        end.update(self.target(command))
        return end

    def _start(self) -> tuple[float, float, float]:
        return self.position.X, self.position.Y, self.position.Z

    def step(self, command: Command) -> None:
        super().step(command)
        if "B" in command.params and not self.is_tool_change(command):
            self.rotate(command)

    def rotate(self, command: Command) -> None:
        value = command.params["B"]
        target = self.position.B + value if command.incremental else value
        delta = shortest_angle(target - self.position.B)
        if self.rotary_rate > 0:
            self.breakdown.add("rotary", abs(delta) / self.rotary_rate / 60.0)
        self.position.B = target

    def rapid(self, command: Command) -> None:
        end = self._end(command)
        distance = calculate_distance(self._start(), (end["X"], end["Y"], end["Z"]))
        self.breakdown.add("rapid", distance / self.rapid_rate)
        self.position.update(end)

    def linear(self, command: Command) -> None:
        end = self._end(command)
        distance = calculate_distance(self._start(), (end["X"], end["Y"], end["Z"]))
        self.breakdown.add("feed", feed_to_minutes(distance, self.feed_per_minute(command, self.rpm)))
        self.position.update(end)

    def arc(self, command: Command) -> None:
        end = self._end(command)
        params = command.params
        first, second, first_offset, second_offset = plane_axes(command.plane)
        normal = ({"X", "Y", "Z"} - {first, second}).pop()

        start_pt = (self.position.get(first), self.position.get(second))
        end_pt = (end[first], end[second])
        if "R" in params and first_offset not in params and second_offset not in params:
            length = radius_arc_length(start_pt, end_pt, params["R"])
        else:
            offsets = (params.get(first_offset, 0.0), params.get(second_offset, 0.0))
            center = ijk_to_center(start_pt, offsets)
            length = arc_length(start_pt, end_pt, center, command.motion is MotionCode.ARC_CW)

        # Helical travel along the plane normal
        length = math.hypot(length, end[normal] - self.position.get(normal))
        self.breakdown.add("arc", feed_to_minutes(length, self.feed_per_minute(command, self.rpm)))
        self.position.update(end)


INTEGRATORS = {
    MachineClass.LATHE: LatheTimeIntegrator,
    MachineClass.MILL: MillTimeIntegrator,
}
