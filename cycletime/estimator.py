"""
Public entry points

Pure functions from program text to estimated seconds. Nothing here reads
files or keeps state between calls.
"""

import logging

from .gcode.commands import Block, Command, InvalidMachineClassError, MachineClass
from .gcode.cycles import DrillPolicy
from .gcode.expander import ProgramExpander
from .gcode.interpreter import INTEGRATORS, TimeBreakdown
from .gcode.parser import GcodeParser

logger = logging.getLogger(__name__)


def parse(text: str, machine_class: MachineClass | str) -> list[Block]:
    """
    Tokenize and modally annotate a program

    Args:
        text: Decoded program text
        machine_class: "lathe" or "mill"

    Returns:
        Blocks in program order (mill programs may contain control records)

    Raises:
        InvalidMachineClassError: for an unknown selector
    """
    return GcodeParser(machine_class).parse_program(text)


def expand(blocks: list[Block], *, drill_policy: DrillPolicy | str | None = None,
           end_label: str | None = None) -> list[Command]:
    """Resolve mill control flow and drill cycles into primitive commands"""
    return ProgramExpander(drill_policy=drill_policy, end_label=end_label).expand(blocks)


def integrate(commands: list[Block], rpm_ceiling: float | None = None, *,
              machine_class: MachineClass | str | None = None) -> TimeBreakdown:
    """
    Run the time integrator

    Control records left in ``commands`` (an unexpanded mill program) are
    skipped.

    Args:
        commands: Parsed (lathe) or expanded (mill) program
        rpm_ceiling: Maximum spindle speed; config default when None
        machine_class: Overrides the machine class the parser recorded on
            the commands

    Returns:
        Elapsed time per move type

    Raises:
        InvalidMachineClassError: for an unknown selector, or when neither
            the argument nor the commands name a machine class
    """
    primitives = [c for c in commands if isinstance(c, Command)]
    if not primitives and machine_class is None:
        return TimeBreakdown()
    if machine_class is None:
        machine_class = primitives[0].machine
    if machine_class is None:
        raise InvalidMachineClassError("Commands carry no machine class; pass machine_class")
    machine = MachineClass.from_selector(machine_class)
    return INTEGRATORS[machine](rpm_ceiling=rpm_ceiling).integrate(primitives)


def compute_time(commands: list[Block], rpm_ceiling: float | None = None, *,
                 machine_class: MachineClass | str | None = None) -> float:
    """Total estimated time of a primitive command stream, in seconds"""
    return integrate(commands, rpm_ceiling, machine_class=machine_class).total_seconds


def estimate(text: str, machine_class: MachineClass | str, rpm_ceiling: float | None = None,
             *, drill_policy: DrillPolicy | str | None = None) -> float:
    """
    Estimate the cycle time of a program

    Args:
        text: Decoded program text
        machine_class: "lathe" or "mill"
        rpm_ceiling: Maximum spindle speed; config default when None
        drill_policy: Mill drill-call persistence

    Returns:
        Seconds, never negative
    """
    machine = MachineClass.from_selector(machine_class)
    blocks = parse(text, machine)
    if machine is MachineClass.MILL:
        blocks = expand(blocks, drill_policy=drill_policy)
    seconds = compute_time(blocks, rpm_ceiling, machine_class=machine)
    logger.info(f"Estimated {machine.value} program: {seconds:.1f} s")
    return seconds
