import pytest

import cycletime
from cycletime import InvalidMachineClassError, MachineClass, estimate
from cycletime.estimator import compute_time, expand, integrate, parse
from cycletime.gcode.commands import Command, MotionCode

pytestmark = [pytest.mark.e2e]


def test_lathe_program(lathe_css_program):
    assert estimate(lathe_css_program, "lathe") == pytest.approx(3.81)


def test_lathe_program_with_ceiling(lathe_css_program):
    assert estimate(lathe_css_program, "lathe", 4000) == pytest.approx(3.81)
    assert estimate(lathe_css_program, "lathe", 1000) > estimate(lathe_css_program, "lathe", 4000)


def test_mill_drill_program(mill_drill_program):
    assert estimate(mill_drill_program, "mill") == pytest.approx(4.938)


def test_mill_drill_policy_changes_hole_count():
    program = "MCALL CYCLE81(10, 0, 2, -5)\nX10 Y0\nX20 Y0\nMCALL"
    one_shot = estimate(program, "mill", drill_policy="one-shot")
    modal = estimate(program, "mill", drill_policy="modal")
    assert modal > one_shot


@pytest.mark.parametrize("selector", ["lathe", " Lathe ", "LATHE", MachineClass.LATHE])
def test_selector_forms(selector, lathe_css_program):
    assert estimate(lathe_css_program, selector) == pytest.approx(3.81)


@pytest.mark.parametrize("selector", ["router", "", "lathe-mill"])
def test_invalid_selector(selector):
    with pytest.raises(InvalidMachineClassError) as exc_info:
        estimate("G0 X1", selector)
    assert isinstance(exc_info.value, ValueError)


def test_empty_program_takes_no_time():
    assert estimate("", "lathe") == 0.0
    assert estimate("%\n; nothing\n%", "mill") == 0.0


def test_compute_time_is_idempotent(mill_drill_program):
    commands = expand(parse(mill_drill_program, "mill"))
    assert compute_time(commands) == compute_time(commands)


def test_integrate_skips_control_records():
    blocks = parse("R1=1\nLOOP:\nG0 X30 Y40", "mill")
    assert integrate(blocks).total_seconds == pytest.approx(0.3)


def test_same_text_different_machine():
    program = "G0 X20 Z0"
    assert estimate(program, "lathe") == pytest.approx(0.06)
    assert estimate(program, "mill") == pytest.approx(0.12)


def test_package_exports():
    assert cycletime.__version__
    assert cycletime.config.RAPID_RATE_MM_MIN > 0


def test_comment_glued_to_word_does_not_change_time():
    assert estimate("F100\nG1 X100(CUT)", "mill") == pytest.approx(60.0)
    assert estimate("F100\nG1 X100(CUT)", "mill") == estimate("F100\nG1 X100", "mill")


def test_machine_class_recorded_on_commands(lathe_css_program):
    commands = parse(lathe_css_program, "lathe")
    assert all(c.machine is MachineClass.LATHE for c in commands)
    assert compute_time(commands) == pytest.approx(3.81)
    assert compute_time(commands, 4000) == pytest.approx(3.81)


def test_drill_primitives_keep_machine_class(mill_drill_program):
    commands = expand(parse(mill_drill_program, "mill"))
    assert all(c.machine is MachineClass.MILL for c in commands)


def test_explicit_machine_class_overrides_commands():
    commands = parse("G0 X20 Z0", "lathe")
    assert compute_time(commands) == pytest.approx(0.06)
    assert compute_time(commands, machine_class="mill") == pytest.approx(0.12)


def test_empty_command_stream():
    assert compute_time([]) == 0.0


def test_commands_without_machine_class_need_selector():
    commands = [Command(opcode="G0", params={"X": 30.0, "Y": 40.0}, motion=MotionCode.RAPID)]
    with pytest.raises(InvalidMachineClassError):
        compute_time(commands)
    assert compute_time(commands, machine_class="mill") == pytest.approx(0.3)
