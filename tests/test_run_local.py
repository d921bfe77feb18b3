from backend.run_local import main
import pathlib

SAMPLE = str(pathlib.Path(__file__).parent / "sample_appliances.csv")


def test_cli_prints_summary_for_sample(capsys):
    assert main([SAMPLE, "--month", "May"]) == 0
    out = capsys.readouterr().out
    # AC in season: 9 + 0.4 + 0.6 + iron 0.5 * 2/30 units a day
    assert "Parsed 5 appliances (4 on), month May:" in out
    assert "Monthly usage: 301.00 units, cost 1527.00" in out
    assert "Status: Good" in out
    assert "WARNING" not in out


def test_cli_reports_breaches_and_vacation(capsys):
    assert main([SAMPLE, "--month", "May", "--daily-limit", "5", "--monthly-limit", "100"]) == 0
    out = capsys.readouterr().out
    assert "WARNING: daily usage above 5.0 units" in out
    assert "WARNING: monthly usage above 100.0 units" in out

    assert main([SAMPLE, "--month", "Dec", "--vacation"]) == 0
    assert "Daily usage:   0.21 units" in capsys.readouterr().out


def test_cli_errors_return_1(capsys, tmp_path):
    assert main([str(tmp_path / "missing.csv")]) == 1
    assert main([SAMPLE, "--month", "Smarch"]) == 1
    assert "error:" in capsys.readouterr().err
