import json

from typer.testing import CliRunner

from komaplan.cli import app

runner = CliRunner()


def _init(*extra):
    return runner.invoke(
        app,
        ["init", "MMLPSS", "--deadline", "2026-03-13", "--rest-days", "0,6", "--weekend-hours", "0", *extra],
    )


def test_init_and_plan(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    result = _init()
    assert result.exit_code == 0, result.stdout
    assert "2 page(s), 5 panel(s)" in result.stdout

    result = runner.invoke(app, ["plan"])
    assert result.exit_code == 0, result.stdout
    assert "2026-03-13" in result.stdout
    assert "do not fit" not in result.stdout

    saved = json.loads((tmp_path / "komaplan_project.json").read_text())
    assert sum(d["usedMinutes"] for d in saved["schedule"]) == 330
    assert saved["weekSummaries"][0]["totalHours"] == 5.5


def test_numeric_shorthand(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "12", "--deadline", "2026-03-13"])
    assert result.exit_code == 0, result.stdout
    saved = json.loads((tmp_path / "komaplan_project.json").read_text())
    assert saved["settings"]["smlpString"] == "LPLL"
    assert len(saved["pages"]) == 2


def test_init_rejects_bad_input(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "xyz", "--deadline", "2026-03-13"])
    assert result.exit_code == 1
    result = runner.invoke(app, ["init", "MML", "--deadline", "13/03/2026"])
    assert result.exit_code == 1
    result = _init("--warmup-factor", "2")
    assert result.exit_code == 1
    assert "warmup_factor" in result.stdout


def test_unknown_holiday_country_is_rejected(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "MML", "--deadline", "2026-03-13", "--country", "XX"])
    assert result.exit_code == 1
    assert "Unsupported holiday country 'XX'" in result.stdout
    assert not (tmp_path / "komaplan_project.json").exists()

    _init()
    result = runner.invoke(app, ["settings", "--country", "XX"])
    assert result.exit_code == 1
    assert "Unsupported holiday country" in result.stdout
    saved = json.loads((tmp_path / "komaplan_project.json").read_text())
    assert saved["settings"]["holidayCountry"] == "JP"

    # A hand-edited project file is caught before scheduling.
    saved["settings"]["holidayCountry"] = "XX"
    (tmp_path / "komaplan_project.json").write_text(json.dumps(saved))
    result = runner.invoke(app, ["plan"])
    assert result.exit_code == 1
    assert "Unsupported holiday country" in result.stdout


def test_commands_require_project(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["plan"])
    assert result.exit_code == 1
    assert "komaplan init" in result.stdout


def test_shortfall_is_reported(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _init("--start", "2026-03-13", "--weekday-hours", "1", "--no-split")
    result = runner.invoke(app, ["plan"])
    assert result.exit_code == 0, result.stdout
    assert "do not fit" in result.stdout


def test_set_panel_and_page(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _init()

    result = runner.invoke(app, ["set-panel", "page-2-panel-1", "--size", "l"])
    assert result.exit_code == 0, result.stdout
    result = runner.invoke(app, ["set-page", "2", "--priority", "1"])
    assert result.exit_code == 0, result.stdout

    saved = json.loads((tmp_path / "komaplan_project.json").read_text())
    panel = saved["pages"][1]["panels"][0]
    assert panel["size"] == "L"
    assert panel["estimatedMinutes"] == 90
    assert saved["pages"][1]["priority"] == 1

    assert runner.invoke(app, ["set-panel", "page-2-panel-1", "--size", "P"]).exit_code == 1
    assert runner.invoke(app, ["set-panel", "page-9-panel-1", "--size", "S"]).exit_code == 1
    assert runner.invoke(app, ["set-page", "9", "--priority", "1"]).exit_code == 1


def test_settings_update(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _init()
    result = runner.invoke(app, ["settings", "--l-min", "120", "--no-split", "--rest-days", ""])
    assert result.exit_code == 0, result.stdout

    saved = json.loads((tmp_path / "komaplan_project.json").read_text())
    assert saved["settings"]["timeSettings"]["L"] == 120
    assert saved["settings"]["allowSplitPanels"] is False
    assert saved["settings"]["restDays"] == []
    assert saved["pages"][0]["panels"][2]["estimatedMinutes"] == 120

    result = runner.invoke(app, ["settings", "--weekday-hours=-3"])
    assert result.exit_code == 1


def test_weekly_and_export(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _init()

    result = runner.invoke(app, ["export", "csv-daily"])
    assert result.exit_code == 1

    runner.invoke(app, ["plan"])
    result = runner.invoke(app, ["weekly"])
    assert result.exit_code == 0, result.stdout
    assert "Weekly summary" in result.stdout

    result = runner.invoke(app, ["export", "csv-weekly"])
    assert result.exit_code == 0
    assert result.stdout.startswith("week_start,week_end")

    out = tmp_path / "plan.md"
    result = runner.invoke(app, ["export", "markdown", "-o", str(out)])
    assert result.exit_code == 0
    assert out.read_text().startswith("# Production schedule")

    assert runner.invoke(app, ["export", "pdf"]).exit_code == 1


def test_custom_project_file(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["--file", "ch1.json", "init", "LLL", "--deadline", "2026-03-13"])
    assert result.exit_code == 0, result.stdout
    assert (tmp_path / "ch1.json").exists()
    result = runner.invoke(app, ["--file", "ch1.json", "pages"])
    assert result.exit_code == 0
    assert "L1 L2 L3" in result.stdout
