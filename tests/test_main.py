"""Tests for the headless runner."""

import argparse
import sys

import orjson
import pytest

from idlefarm.exceptions import ConfigurationError
from main import main, parse_override, run_headless


class TestParseOverride:
    def test_json_values(self) -> None:
        assert parse_override("victory.plots=40") == ("victory.plots", 40)
        assert parse_override("automation.watering_enabled=false") == ("automation.watering_enabled", False)
        assert parse_override("persona.efficiency=0.5") == ("persona.efficiency", 0.5)

    def test_plain_strings(self) -> None:
        assert parse_override("start.hour=eight") == ("start.hour", "eight")

    @pytest.mark.parametrize("raw", ["victory.plots", "=3"])
    def test_malformed(self, raw) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_override(raw)


def test_run_headless_exports_summary(tmp_path) -> None:
    export = tmp_path / "run.json"

    code = run_headless("casual", 10, seed=1, overrides=[("victory.plots", 3)], export=str(export))

    assert code == 0
    summary = orjson.loads(export.read_bytes())
    assert summary["completed"] is True
    assert summary["ticks"] == 1


def test_run_headless_rejects_bad_overrides() -> None:
    with pytest.raises(ConfigurationError):
        run_headless("casual", 1, overrides=[("victory.nope", 1)])


def test_main_exit_codes(monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["main.py", "--ticks", "1", "--seed", "1", "--set", "victory.plots=3"])
    with pytest.raises(SystemExit) as ok:
        main()
    assert ok.value.code == 0

    monkeypatch.setattr(sys, "argv", ["main.py", "--ticks", "1", "--set", "victory.nope=1"])
    with pytest.raises(SystemExit) as bad:
        main()
    assert bad.value.code == 1
