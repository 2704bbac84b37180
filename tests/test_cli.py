"""Tests for the command line entry point."""

import json
import os
import tempfile
from unittest.mock import patch

from extractly.__main__ import main
from extractly.constants import DashboardConstants
from extractly.settings_persistence import SettingsPersistence


def write_json(directory, name, data):
    path = os.path.join(directory, name)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path


def test_version(capsys):
    with patch("extractly.__main__.get_version_string", return_value="1.2.3"):
        assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "1.2.3"


def test_export_summary(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_json(tmpdir, "result.json",
                          {"summary": "Hello.", "keyPoints": ["Point 1", "Point 2"]})
        assert main(["export", path, "-o", tmpdir]) == 0
        assert os.path.exists(os.path.join(tmpdir, DashboardConstants.SUMMARY_EXPORT_FILENAME))
    assert "Wrote" in capsys.readouterr().out


def test_export_history():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_json(tmpdir, "history.json", {
            "content": [{"id": 1, "url": "https://example.com", "content": "Body"}],
            "page": 0,
            "totalPages": 1,
        })
        assert main(["export", "--history", path, "-o", tmpdir]) == 0
        assert os.path.exists(os.path.join(tmpdir, DashboardConstants.HISTORY_EXPORT_FILENAME))


def test_export_invalid_json(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "bad.json")
        with open(path, "w") as f:
            f.write("nope")
        assert main(["export", path]) == 1
    assert "Error" in capsys.readouterr().err


def test_export_missing_file(capsys):
    assert main(["export", "/nonexistent/result.json"]) == 1


def test_export_usage_errors(capsys):
    assert main(["export"]) == 2
    assert main(["export", "a.json", "b.json"]) == 2
    assert main(["export", "a.json", "-o"]) == 2


def test_dashboard_is_started_with_file(tmp_path):
    settings = SettingsPersistence(config_dir=tmp_path)
    with patch("extractly.textual_app.get_persistence", return_value=settings), \
            patch("extractly.textual_app.ExtractlyApp.run") as run:
        assert main(["result.json"]) == 0
    run.assert_called_once()


def test_dashboard_is_started_with_history(tmp_path):
    settings = SettingsPersistence(config_dir=tmp_path)
    with patch("extractly.textual_app.get_persistence", return_value=settings), \
            patch("extractly.textual_app.ExtractlyApp.run") as run, \
            patch("extractly.textual_app.ExtractlyApp.__init__", return_value=None) as init:
        assert main(["result.json", "--history", "history.json"]) == 0
    init.assert_called_once_with(filename="result.json", history_filename="history.json")
    run.assert_called_once()


def test_dashboard_usage_errors(capsys):
    assert main(["--history"]) == 2
    assert main(["a.json", "b.json"]) == 2
