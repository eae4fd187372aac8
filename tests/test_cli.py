"""Tests for the websift CLI.

``cli.main.open_orchestrator`` is patched to yield an orchestrator built on
fake browsing contexts, so commands run end-to-end without Chromium.
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from typer.testing import CliRunner

from cli.main import app
from websift.db import get_connection, init_db
from websift.db.kv import set_value
from websift.db.results import get_result, save_result
from websift.models import SearchResult
from websift.orchestrator import SearchOrchestrator
from websift.scraper.browser import PlaywrightContextProvider
from websift.scraper.harvester import PageHarvester
from websift.updates import PENDING_UPDATE_KEY

from fakes import FakeContextProvider, StaticProvider

runner = CliRunner()

URLS = ["https://en.wikipedia.org/wiki/Machine_learning", "https://www.ibm.com/topics/ml"]


@pytest.fixture
def fake_pipeline(monkeypatch) -> FakeContextProvider:
    provider = FakeContextProvider(nav_fail=["https://down.example/"])

    @asynccontextmanager
    async def _open(conn):
        yield SearchOrchestrator(
            PageHarvester(provider, timeout=1.0),
            providers=[StaticProvider("wikipedia", URLS[:1]), StaticProvider("duckduckgo", URLS)],
            conn=conn,
        )

    monkeypatch.setattr("cli.main.open_orchestrator", _open)
    return provider


def _json_from(output: str) -> dict:
    return json.loads(output[output.index("{"):])


class TestSearch:
    def test_prints_sources(self, fake_pipeline):
        result = runner.invoke(app, ["search", "--query", "machine learning", "--id", "cli-1"])
        assert result.exit_code == 0, result.output
        assert "cli-1" in result.stdout
        assert "sources=2" in result.stdout
        assert URLS[1] in result.stdout
        assert fake_pipeline.opened == fake_pipeline.closed == 2

    def test_result_is_stored(self, fake_pipeline):
        runner.invoke(app, ["search", "--query", "ml", "--id", "cli-2"])
        conn = get_connection()
        try:
            stored = get_result(conn, "cli-2")
        finally:
            conn.close()
        assert stored is not None
        assert len(stored.sources) == 2

    def test_json_envelope(self, fake_pipeline):
        result = runner.invoke(
            app, ["search", "--query", "ml", "--budget", "1", "--id", "cli-3", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = _json_from(result.stdout)
        assert data["success"] is True
        assert data["resultCount"] == 1

    def test_invalid_budget_fails(self, fake_pipeline):
        result = runner.invoke(app, ["search", "--query", "ml", "--budget", "0"])
        assert result.exit_code == 1
        assert "✗" in result.output


class TestDiscover:
    def test_lists_candidates_with_backend(self, fake_pipeline):
        result = runner.invoke(app, ["discover", "--query", "ml"])
        assert result.exit_code == 0, result.output
        assert "2 URL(s)" in result.stdout
        assert f"[wikipedia]  {URLS[0]}" in result.stdout
        assert f"[duckduckgo]  {URLS[1]}" in result.stdout
        assert fake_pipeline.opened == 0


class TestExtract:
    def test_reports_extracted_count(self, fake_pipeline):
        result = runner.invoke(
            app, ["extract", "--url", "https://ok.example/", "--url", "https://down.example/"]
        )
        assert result.exit_code == 0, result.output
        assert "1 of 2 page(s) extracted" in result.stdout
        assert "https://ok.example/" in result.stdout


class TestResultsCommands:
    def test_show_missing(self):
        result = runner.invoke(app, ["results", "show", "nope"])
        assert result.exit_code == 1
        assert "No result" in result.stdout

    def test_show_and_list(self):
        conn = get_connection()
        init_db(conn)
        save_result(conn, SearchResult(request_id="stored-1", query="batteries"))
        conn.close()

        shown = runner.invoke(app, ["results", "show", "stored-1", "--json"])
        assert shown.exit_code == 0
        assert json.loads(shown.stdout)["query"] == "batteries"

        listed = runner.invoke(app, ["results", "list"])
        assert "stored-1" in listed.stdout

    def test_purge(self):
        conn = get_connection()
        init_db(conn)
        save_result(conn, SearchResult(request_id="old", query="q", timestamp=0))
        conn.close()

        result = runner.invoke(app, ["results", "purge"])
        assert result.exit_code == 0
        assert "Removed 1" in result.stdout


class TestMisc:
    def test_db_init(self):
        result = runner.invoke(app, ["db", "init"])
        assert result.exit_code == 0
        assert "Database ready" in result.stdout

    def test_updates_show(self):
        conn = get_connection()
        init_db(conn)
        set_value(
            conn,
            PENDING_UPDATE_KEY,
            {"id": "edgeai-v2.3", "url": "https://dl.example.test/e.zip", "detected_at": 1},
        )
        conn.close()

        result = runner.invoke(app, ["updates", "show"])
        assert result.exit_code == 0
        assert "edgeai-v2.3" in result.stdout

    def test_updates_show_none(self):
        result = runner.invoke(app, ["updates", "show"])
        assert "No pending update" in result.stdout


class TestBrowserUnavailable:
    @pytest.fixture(autouse=True)
    def no_chromium(self, monkeypatch):
        monkeypatch.setattr(
            PlaywrightContextProvider,
            "start",
            AsyncMock(side_effect=RuntimeError("Executable doesn't exist at chrome-linux")),
        )
        monkeypatch.setattr(
            "websift.orchestrator.build_default_providers",
            lambda: [StaticProvider("wikipedia", URLS[:1]), StaticProvider("duckduckgo", URLS)],
        )

    def test_discover_does_not_need_a_browser(self):
        result = runner.invoke(app, ["discover", "--query", "ml", "--json"])
        assert result.exit_code == 0, result.output
        data = _json_from(result.stdout)
        assert data["success"] is True
        assert data["resultCount"] == 2

    def test_search_reports_no_sources(self):
        result = runner.invoke(app, ["search", "--query", "ml", "--json"])
        assert result.exit_code == 0, result.output
        data = _json_from(result.stdout)
        assert data["success"] is True
        assert data["resultCount"] == 0
        assert data["results"]["status"] == "completed"


class TestPipelineSetupFailure:
    @pytest.fixture(autouse=True)
    def broken_pipeline(self, monkeypatch):
        @asynccontextmanager
        async def _open(conn):
            raise RuntimeError("browser unavailable")
            yield

        monkeypatch.setattr("cli.main.open_orchestrator", _open)

    def test_json_envelope_carries_error(self):
        result = runner.invoke(app, ["discover", "--query", "ml", "--json"])
        assert result.exit_code == 0, result.output
        data = _json_from(result.stdout)
        assert data["success"] is False
        assert data["error"] == "browser unavailable"

    def test_plain_output_exits_nonzero(self):
        result = runner.invoke(app, ["search", "--query", "ml", "--id", "cli-9"])
        assert result.exit_code == 1
        assert "✗ browser unavailable" in result.output
