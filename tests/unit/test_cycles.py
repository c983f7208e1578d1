import pytest

from cycletime.gcode.commands import Command, MotionCode
from cycletime.gcode.cycles import DrillCycle, DrillPolicy, ThreadingConvention, ThreadingCycle

pytestmark = [pytest.mark.unit, pytest.mark.gcode]


def _position(**params):
    return Command(opcode=None, params={k: float(v) for k, v in params.items()},
                   motion=MotionCode.RAPID, line_number=7)


def test_drill_cycle_expands_to_five_primitives_in_order():
    cycle = DrillCycle.from_call("CYCLE81", (10.0, 0.0, 2.0, -5.0))
    primitives = cycle.expand(_position(X=10, Y=20))

    assert [p.motion for p in primitives] == [
        MotionCode.RAPID,
        MotionCode.RAPID,
        MotionCode.RAPID,
        MotionCode.LINEAR,
        MotionCode.RAPID,
    ]
    assert [p.params for p in primitives] == [
        {"Z": 10.0},
        {"X": 10.0, "Y": 20.0},
        {"Z": 2.0},
        {"Z": -5.0},
        {"Z": 10.0},
    ]
    assert [p.opcode for p in primitives] == ["G0", "G0", "G0", "G1", "G0"]
    assert all(p.line_number == 7 for p in primitives)
    assert cycle.passes == 1


def test_drill_cycle_carries_feed_of_position_block():
    cycle = DrillCycle.from_call("CYCLE81", (10.0, 0.0, 2.0, -5.0))
    primitives = cycle.expand(_position(X=1, F=80))
    assert primitives[1].params == {"X": 1.0, "F": 80.0}


def test_drill_cycle_pads_missing_arguments():
    cycle = DrillCycle.from_call("CYCLE82", (5.0,))
    assert (cycle.approach, cycle.plane, cycle.safety, cycle.depth) == (5.0, 0.0, 0.0, 0.0)
    assert cycle.name == "CYCLE82"


def test_drill_cycle_does_not_mutate_template():
    template = _position(X=3, Y=4)
    DrillCycle.from_call("CYCLE81", (1.0, 0.0, 0.0, -1.0)).expand(template)
    assert template.params == {"X": 3.0, "Y": 4.0}
    assert template.motion is MotionCode.RAPID


@pytest.mark.parametrize(
    "name,expected",
    [("one-shot", DrillPolicy.ONE_SHOT), ("ONE_SHOT", DrillPolicy.ONE_SHOT),
     ("modal", DrillPolicy.MODAL), (DrillPolicy.MODAL, DrillPolicy.MODAL)],
)
def test_drill_policy_from_name(name, expected):
    assert DrillPolicy.from_name(name) is expected


def test_drill_policy_rejects_unknown():
    with pytest.raises(ValueError):
        DrillPolicy.from_name("sometimes")


@pytest.mark.parametrize(
    "total,step,expected",
    [(1.0, 0.2, 6), (1.0, 0.3, 5), (0.0, 0.2, 1), (1.0, 0.0, 2), (0.2, 0.2, 2)],
)
def test_thread_pass_count(total, step, expected):
    assert ThreadingCycle.pass_count(total, step) == expected


def test_thread_depths_from_micrometers():
    thread = ThreadingCycle()
    convention = ThreadingConvention()
    thread.set_finish(Command(opcode="G76", params={"P": 10060.0, "Q": 50.0}), convention)
    passes = thread.set_depths(
        Command(opcode="G76", params={"X": 17.5, "Z": -25.0, "P": 1000.0, "Q": 200.0}), convention
    )
    assert thread.finish_depth == pytest.approx(0.05)
    assert thread.total_depth == pytest.approx(1.0)
    assert thread.step_depth == pytest.approx(0.2)
    assert passes == 6


def test_thread_alternate_convention():
    convention = ThreadingConvention(total_slot="Q", step_slot="P", depth_scale=1.0)
    thread = ThreadingCycle()
    passes = thread.set_depths(Command(opcode="G76", params={"Z": -10.0, "P": 0.2, "Q": 1.0}), convention)
    assert passes == 6


def test_thread_time_is_linear_in_travel():
    thread = ThreadingCycle()
    thread.passes = 6
    single = thread.minutes(30.0, 750.0)
    assert single == pytest.approx(0.24)
    assert thread.minutes(-60.0, 750.0) == pytest.approx(2 * single)
    assert thread.minutes(30.0, 0.0) == 0.0


def test_is_cutting_block():
    assert ThreadingCycle.is_cutting_block(Command(opcode="G76", params={"Z": -5.0}))
    assert not ThreadingCycle.is_cutting_block(Command(opcode="G76", params={"P": 1.0, "Q": 50.0}))
