"""
CLI entry point for the cycletime command.

Reads one G-code file and prints the estimated cycle time in seconds.
"""

import argparse
import logging
import sys
from pathlib import Path

from cycletime import config
from cycletime.config import TRACE
from cycletime.estimator import expand, integrate, parse
from cycletime.gcode.commands import InvalidMachineClassError, MachineClass

logger = logging.getLogger("cycletime.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estimate machining cycle time from ISO G-code")
    parser.add_argument("file", help="G-code program (.iso, .nc, .ngc, .txt)")
    parser.add_argument("-m", "--machine", required=True, help="Machine class: lathe or mill")
    parser.add_argument("--rpm-max", type=float, default=None,
                        help=f"Spindle speed ceiling (default {config.DEFAULT_RPM_CEILING:g})")
    parser.add_argument("--drill-policy", choices=["one-shot", "modal"], default=None,
                        help="Keep MCALL drill cycles for one position or until closed")
    parser.add_argument("--breakdown", action="store_true",
                        help="Also print time per move type")
    parser.add_argument("--encoding", default="utf-8", help="File encoding")

    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Enable quiet logging (ERROR level)")
    parser.add_argument("--log-level", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Set specific log level")
    return parser


def resolve_log_level(args: argparse.Namespace) -> int:
    if args.log_level:
        if args.log_level == "TRACE":
            return TRACE
        return getattr(logging, args.log_level)
    if args.verbose >= 3:
        return TRACE
    if args.verbose == 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    if args.quiet:
        return logging.ERROR
    return getattr(logging, config.LOG_LEVEL_DEFAULT)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=resolve_log_level(args),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        machine = MachineClass.from_selector(args.machine)
    except InvalidMachineClassError as e:
        parser.error(str(e))

    try:
        text = Path(args.file).read_text(encoding=args.encoding)
    except OSError as e:
        logger.error(f"Failed to read {args.file}: {e}")
        return 1

    blocks = parse(text, machine)
    if machine is MachineClass.MILL:
        blocks = expand(blocks, drill_policy=args.drill_policy)
    breakdown = integrate(blocks, args.rpm_max, machine_class=machine)

    print(f"{breakdown.total_seconds:.1f}")
    if args.breakdown:
        for kind, seconds in breakdown.as_seconds().items():
            print(f"  {kind:<10} {seconds:10.1f} s")
    return 0


def main_entry():
    """Entry point for the cycletime command."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
