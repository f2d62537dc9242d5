# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the CrossNav CLI (run / validate / export / import)."""

from __future__ import annotations

import argparse
import json
import logging

import pytest
import structlog

from crossnav.cli import DEFAULT_DB_PATH, _apply_env_overrides, build_parser, main
from crossnav.serializer import profiles_to_json
from tests._rule_helpers import html, make_profile, matcher

JAVDB_PAGE = html("<div class='video-meta-panel'><h2><strong>ABC-123</strong> Title</h2></div>")


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    for var in ("CROSSNAV_DB_PATH", "CROSSNAV_LOG_LEVEL", "CROSSNAV_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    yield
    root.handlers = old_handlers
    structlog.reset_defaults()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "rules.db")


def _write(tmp_path, name: str, text: str):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def _args(*argv: str) -> argparse.Namespace:
    return _apply_env_overrides(build_parser().parse_args([*argv, "validate", "x.json"]))


class TestEnvOverrides:
    def test_defaults(self):
        args = _args()
        assert args.db_path == DEFAULT_DB_PATH
        assert args.log_level == "WARNING"
        assert args.log_json is False

    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("CROSSNAV_DB_PATH", "/tmp/env.db")
        monkeypatch.setenv("CROSSNAV_LOG_LEVEL", "INFO")
        monkeypatch.setenv("CROSSNAV_LOG_JSON", "Yes")
        args = _args()
        assert args.db_path == "/tmp/env.db"
        assert args.log_level == "INFO"
        assert args.log_json is True

    def test_flags_beat_env(self, monkeypatch):
        monkeypatch.setenv("CROSSNAV_DB_PATH", "/tmp/env.db")
        monkeypatch.setenv("CROSSNAV_LOG_LEVEL", "INFO")
        args = _args("--db-path", "/tmp/flag.db", "-v")
        assert args.db_path == "/tmp/flag.db"
        assert args.log_level == "DEBUG"

    def test_missing_subcommand_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestRun:
    def test_match_prints_result_json(self, tmp_path, db_path, capsys):
        page = _write(tmp_path, "page.html", JAVDB_PAGE)
        code = main(["--db-path", db_path, "run", "--url", "https://javdb.com/v/abc", "--html", page])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["siteId"] == "javdb"
        assert data["identifiers"]["fanhao"]["value"] == "ABC-123"
        urls = {link["targetSiteId"]: link["url"] for link in data["links"]}
        assert urls["avbase"] == "https://www.avbase.net/works?q=ABC-123"

    def test_shift_jis_page(self, tmp_path, db_path, capsys):
        page = tmp_path / "page.html"
        markup = "<html><head><meta charset='shift_jis'></head><body><h1 class='text-base'>品番-123 タイトル</h1></body></html>"
        page.write_bytes(markup.encode("shift_jis"))
        code = main(["--db-path", db_path, "run", "--url", "https://missav.ws/cn/abc-123", "--html", str(page)])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["siteId"] == "missav"
        assert data["identifiers"]["fanhao"]["value"] == "品番-123"

    def test_no_match_exit_code(self, tmp_path, db_path, capsys):
        page = _write(tmp_path, "page.html", html("<p>nothing</p>"))
        code = main(["--db-path", db_path, "run", "--url", "https://example.org/", "--html", page])
        assert code == 1
        assert "No site rule matched" in capsys.readouterr().err

    def test_missing_html_file(self, tmp_path, db_path, capsys):
        code = main(["--db-path", db_path, "run", "--url", "https://javdb.com/v/a", "--html", str(tmp_path / "no.html")])
        assert code == 1
        assert "Error:" in capsys.readouterr().err


class TestValidate:
    def test_valid_file(self, tmp_path, capsys):
        path = _write(tmp_path, "rules.json", profiles_to_json([make_profile("alpha", matchers=(matcher("a"),))]))
        assert main(["validate", path]) == 0
        assert "OK: 1 profile(s)" in capsys.readouterr().out

    def test_invalid_file_lists_errors(self, tmp_path, capsys):
        rules = [make_profile("alpha", keywords=("dup",)), make_profile("beta", keywords=("dup",))]
        path = _write(tmp_path, "rules.json", profiles_to_json(rules))
        assert main(["validate", path]) == 1
        out = capsys.readouterr().out
        assert "[duplicate-keyword] beta: Keyword dup already used by alpha" in out

    def test_undecodable_file(self, tmp_path, capsys):
        path = _write(tmp_path, "rules.json", "{oops")
        assert main(["validate", path]) == 1
        assert "Invalid rule file" in capsys.readouterr().err


class TestImportExport:
    def test_export_defaults_to_stdout(self, db_path, capsys):
        assert main(["--db-path", db_path, "export"]) == 0
        ids = [p["id"] for p in json.loads(capsys.readouterr().out)]
        assert ids[:2] == ["missav", "javdb"]

    def test_import_then_export(self, tmp_path, db_path, capsys):
        rules = [make_profile("alpha", matchers=(matcher("alpha"),))]
        path = _write(tmp_path, "rules.json", profiles_to_json(rules))
        assert main(["--db-path", db_path, "import", path]) == 0
        assert "Imported 1 profile(s)" in capsys.readouterr().out

        out_file = tmp_path / "out" / "exported.json"
        assert main(["--db-path", db_path, "export", "-o", str(out_file)]) == 0
        assert [p["id"] for p in json.loads(out_file.read_text(encoding="utf-8"))] == ["alpha"]

    def test_rejected_import_reports_every_error(self, tmp_path, db_path, capsys):
        rules = [make_profile("alpha", keywords=()), make_profile("beta", matchers=(matcher("("),))]
        path = _write(tmp_path, "rules.json", profiles_to_json(rules))
        assert main(["--db-path", db_path, "import", path]) == 1
        err = capsys.readouterr().err
        assert "[missing-field] alpha" in err
        assert "[invalid-regex] beta" in err
        assert "Rejected: 2 validation error(s)" in err

        assert main(["--db-path", db_path, "export"]) == 0
        assert json.loads(capsys.readouterr().out)[0]["id"] == "missav"
