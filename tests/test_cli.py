import io
import json
import sys

import pipeline.cli as cli


def test_cli_reports_errors_and_fails(capsys):
    code = cli.main(["--target", "10.0.0.1,bad..com", "--log-level", "ERROR"])

    out = capsys.readouterr().out
    assert code == cli.EXIT_INVALID_TARGETS
    assert "line 1 'bad..com': invalid domain name" in out


def test_cli_clean_input_exits_zero(tmp_path, capsys):
    input_file = tmp_path / "targets.txt"
    input_file.write_text("10.0.0.0/24\n# scope\nexample.com\n")

    code = cli.main(["--input", str(input_file), "--log-level", "ERROR"])

    assert code == cli.EXIT_OK
    assert capsys.readouterr().out == ""


def test_cli_json_output_and_report_file(tmp_path, capsys):
    output_path = tmp_path / "report.json"

    code = cli.main([
        "--target", "10.0/24",
        "--format", "json",
        "--output", str(output_path),
        "--no-fail",
        "--log-level", "ERROR",
    ])

    printed = json.loads(capsys.readouterr().out)
    assert code == cli.EXIT_OK
    assert printed["total_errors"] == 1
    assert printed["errors"][0]["suggestion"] == "10.0.0.0/24"
    assert json.loads(output_path.read_text()) == printed


def test_cli_missing_input_file(tmp_path, capsys):
    code = cli.main(["--input", str(tmp_path / "missing.txt"), "--log-level", "ERROR"])

    assert code == cli.EXIT_UNREADABLE_INPUT
    assert "unable to read targets" in capsys.readouterr().err


def test_cli_reads_stdin_by_default(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("10.0.0.5-10.0.0.1\n"))

    code = cli.main(["--log-level", "ERROR"])

    assert code == cli.EXIT_INVALID_TARGETS
    assert "start IP must not be greater than end IP" in capsys.readouterr().out


def test_cli_uses_config_sources_and_settings(tmp_path, capsys):
    scope = tmp_path / "scope.txt"
    scope.write_text("a.1\n")
    config = tmp_path / "validator.yaml"
    config.write_text(
        "settings:\n"
        "  log_level: ERROR\n"
        "  fail_on_errors: false\n"
        "sources:\n"
        "  - name: scope\n"
        "    type: file\n"
        "    location: {0}\n".format(scope)
    )

    code = cli.main(["--config", str(config)])

    assert code == cli.EXIT_OK
    assert "line 1 'a.1'" in capsys.readouterr().out


def test_cli_passes_sources_to_run_validation(monkeypatch):
    captured = {}

    def fake_run_validation(**kwargs):
        captured["kwargs"] = kwargs
        from pipeline.engine import ValidationReport
        return ValidationReport()

    monkeypatch.setattr(cli, "run_validation", fake_run_validation)

    code = cli.main(["--input", "scope.txt", "--target", "10.0.0.1", "--log-level", "ERROR"])

    assert code == cli.EXIT_OK
    sources = captured["kwargs"]["sources"]
    assert [(s.name, s.type) for s in sources] == [("scope.txt", "file"), ("inline-1", "inline")]
    assert "output" not in captured["kwargs"]


def test_cli_unwritable_report_path(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    code = cli.main([
        "--target", "10.0.0.1",
        "--output", str(blocker / "report.json"),
        "--log-level", "ERROR",
    ])

    err = capsys.readouterr().err
    assert code == cli.EXIT_UNWRITABLE_OUTPUT
    assert "unable to write report" in err
    assert "unable to read targets" not in err
