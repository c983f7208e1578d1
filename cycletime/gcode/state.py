"""
GCODE State Management

Tracks the modal groups a block inherits from earlier blocks:
- Motion mode (G0/G1/G2/G3, G4 is non-modal)
- Feed mode (G94/G98 per minute, G95/G99 per revolution)
- Spindle mode (G96 constant surface speed, G97 constant RPM)
- C-axis engagement (M14/M15, dropped by M5)
- Plane (G17/G18/G19) and positioning mode (G90/G91) on the mill

The state is an explicit value: the parser threads one instance through a
program and annotates every command with a snapshot of it.
"""

from dataclasses import dataclass, field

from .commands import Command, FeedMode, MachineClass, MotionCode, SpindleMode

MOTION_CODES = {
    "G0": MotionCode.RAPID,
    "G1": MotionCode.LINEAR,
    "G2": MotionCode.ARC_CW,
    "G3": MotionCode.ARC_CCW,
    "G4": MotionCode.DWELL,
}

LATHE_AXES = ("X", "Z", "C")
MILL_AXES = ("X", "Y", "Z", "B")


@dataclass
class ModalState:
    """Modal GCODE state carried across the blocks of one program"""

    machine: MachineClass = MachineClass.LATHE
    motion_mode: MotionCode = MotionCode.RAPID
    feed_mode: FeedMode = FeedMode.PER_REVOLUTION
    spindle_mode: SpindleMode = SpindleMode.CONSTANT_RPM
    rotary_engaged: bool = False
    plane: str = "G17"
    positioning_mode: str = "G90"

    @classmethod
    def for_machine(cls, machine: MachineClass) -> "ModalState":
        """Initial state of a program for ``machine``"""
        if machine is MachineClass.MILL:
            # Mills have no per-revolution duality
            return cls(machine=machine, feed_mode=FeedMode.PER_MINUTE)
        return cls(machine=machine, plane="G18")

    @property
    def axes(self) -> tuple[str, ...]:
        return MILL_AXES if self.machine is MachineClass.MILL else LATHE_AXES

    def update_from_codes(self, codes: tuple[str, ...]) -> MotionCode | None:
        """
        Apply every modal code of a block

        Args:
            codes: Canonical G/M/T words of the block

        Returns:
            The motion code named on the block (dwell included), or None
        """
        named = None
        for code in codes:
            if code in MOTION_CODES:
                named = MOTION_CODES[code]
                if named is not MotionCode.DWELL:
                    self.motion_mode = named

            elif code in ("G94", "G98"):
                if self.machine is MachineClass.LATHE:
                    self.feed_mode = FeedMode.PER_MINUTE
            elif code in ("G95", "G99"):
                if self.machine is MachineClass.LATHE:
                    self.feed_mode = FeedMode.PER_REVOLUTION

            elif code == "G96":
                self.spindle_mode = SpindleMode.CONSTANT_SURFACE_SPEED
            elif code == "G97":
                self.spindle_mode = SpindleMode.CONSTANT_RPM

            elif code == "M14":
                self.rotary_engaged = True
            elif code in ("M15", "M5"):
                self.rotary_engaged = False

            elif self.machine is MachineClass.MILL:
                if code in ("G17", "G18", "G19"):
                    self.plane = code
                elif code in ("G90", "G91"):
                    self.positioning_mode = code
        return named

    def apply(self, command: Command) -> Command:
        """
        Update state from a block and annotate the block with the result

        A block naming a motion code moves with it; a block with no code
        but an axis word inherits the last motion; everything else has
        no motion.
        """
        named = self.update_from_codes(command.codes)
        if named is not None:
            motion = named
        elif command.opcode is None and any(
            axis in command.params or axis in command.expressions for axis in self.axes
        ):
            motion = self.motion_mode
        else:
            motion = MotionCode.NONE

        command.machine = self.machine
        command.motion = motion
        command.feed_mode = self.feed_mode
        command.spindle_mode = self.spindle_mode
        command.rotary_engaged = self.rotary_engaged
        command.plane = self.plane
        command.incremental = self.positioning_mode == "G91"
        return command


@dataclass
class MachinePosition:
    """Current pose only. Lathe X is stored in the radius domain."""

    X: float = 0.0
    Y: float = 0.0
    Z: float = 0.0
    B: float = 0.0
    C: float = 0.0

    def get(self, axis: str) -> float:
        return getattr(self, axis)

    def as_dict(self) -> dict[str, float]:
        return {"X": self.X, "Y": self.Y, "Z": self.Z, "B": self.B, "C": self.C}

    def update(self, values: dict[str, float]) -> None:
        for axis, value in values.items():
            setattr(self, axis, value)


@dataclass
class RegisterBank:
    """Mill R-parameters for one expansion pass; unset registers read 0"""

    values: dict[str, float] = field(default_factory=dict)

    def __getitem__(self, name: str) -> float:
        return self.values.get(name.upper(), 0.0)

    def __setitem__(self, name: str, value: float) -> None:
        self.values[name.upper()] = float(value)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self.values
