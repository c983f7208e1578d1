import pytest

from cycletime.cli.estimate import build_parser, main, resolve_log_level
from cycletime.config import TRACE

pytestmark = [pytest.mark.e2e]


@pytest.fixture
def lathe_file(tmp_path, lathe_css_program):
    path = tmp_path / "turn.iso"
    path.write_text(lathe_css_program)
    return path


def test_prints_seconds(lathe_file, capsys):
    assert main([str(lathe_file), "-m", "lathe"]) == 0
    assert capsys.readouterr().out.strip() == "3.8"


def test_breakdown_output(lathe_file, capsys):
    assert main([str(lathe_file), "--machine", "lathe", "--breakdown"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "3.8"
    assert any(line.split()[0] == "feed" for line in lines[1:])


def test_rpm_max_option(lathe_file, capsys):
    assert main([str(lathe_file), "-m", "lathe", "--rpm-max", "10000"]) == 0
    assert capsys.readouterr().out.strip() == "2.4"


def test_mill_file(tmp_path, mill_drill_program, capsys):
    path = tmp_path / "drill.nc"
    path.write_text(mill_drill_program)
    assert main([str(path), "-m", "mill", "--drill-policy", "modal"]) == 0
    assert capsys.readouterr().out.strip() == "4.9"


def test_unknown_machine_exits(lathe_file):
    with pytest.raises(SystemExit) as exc_info:
        main([str(lathe_file), "-m", "router"])
    assert exc_info.value.code == 2


def test_missing_file_returns_error(tmp_path):
    assert main([str(tmp_path / "missing.iso"), "-m", "lathe"]) == 1


@pytest.mark.parametrize(
    "argv,expected",
    [
        ([], 30),
        (["-v"], 20),
        (["-vv"], 10),
        (["-vvv"], TRACE),
        (["-q"], 40),
        (["--log-level", "TRACE"], TRACE),
        (["--log-level", "ERROR", "-v"], 40),
    ],
)
def test_log_level_resolution(argv, expected):
    args = build_parser().parse_args(["prog.iso", "-m", "lathe", *argv])
    assert resolve_log_level(args) == expected
