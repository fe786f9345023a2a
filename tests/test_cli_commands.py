"""
Unit Tests for CLI Commands

Tests the CLI entry points without a database or AI provider.
Services are swapped for the in-memory store and a fake AI client.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from knowledge_hub.ai import AIClientConfig
from knowledge_hub.cli import commands
from knowledge_hub.documents import InMemoryDocumentStore
from knowledge_hub.embeddings import EMBEDDING_DIM, local_embed

from conftest import FakeAIClient, make_document


@pytest.fixture
def services():
    store = InMemoryDocumentStore(
        [
            make_document("d1", title="Alpha notes", content="First", embedding=[1.0, 0.0]),
            make_document("d2", title="Beta", content="Second"),
        ]
    )
    return store, FakeAIClient(embedding=[1.0, 0.0]), AIClientConfig(timeout_s=1.0)


# ---------------------------------------------------------------------------
# LOAD_ENV TESTS
# ---------------------------------------------------------------------------


class TestLoadEnv:
    def test_load_env_does_not_raise(self):
        commands._load_env()


# ---------------------------------------------------------------------------
# MAIN CLI DISPATCH TESTS
# ---------------------------------------------------------------------------


class TestMainCliDispatch:
    """Test main CLI dispatches to correct handlers."""

    @pytest.mark.parametrize(
        "command,handler",
        [
            ("serve", "run_serve_cli"),
            ("search", "run_search_cli"),
            ("ask", "run_ask_cli"),
            ("embed", "run_embed_cli"),
        ],
    )
    def test_dispatch(self, command, handler):
        with patch.object(commands, handler, return_value=0) as mock_handler:
            with patch("sys.argv", ["knowledge-hub", command]):
                result = commands.main()

        mock_handler.assert_called_once()
        assert result == 0

    def test_remaining_args_reinjected(self):
        seen = {}

        def fake_search():
            import sys

            seen["argv"] = list(sys.argv)
            return 0

        with patch.object(commands, "run_search_cli", side_effect=fake_search):
            with patch("sys.argv", ["knowledge-hub", "search", "alpha", "--mode", "semantic"]):
                commands.main()

        assert seen["argv"][1:] == ["alpha", "--mode", "semantic"]

    def test_unknown_command_exits(self):
        with patch("sys.argv", ["knowledge-hub", "bogus"]):
            with pytest.raises(SystemExit):
                commands.main()

    def test_keyboard_interrupt_returns_130(self):
        with patch.object(commands, "run_embed_cli", side_effect=KeyboardInterrupt):
            with patch("sys.argv", ["knowledge-hub", "embed"]):
                assert commands.main() == 130


# ---------------------------------------------------------------------------
# SUBCOMMAND TESTS
# ---------------------------------------------------------------------------


class TestSearchCli:
    def test_text_search_output(self, services, capsys):
        with patch.object(commands, "_build_services", return_value=services):
            with patch("sys.argv", ["search", "alpha"]):
                assert commands.run_search_cli() == 0

        out = capsys.readouterr().out
        assert "Alpha notes (d1)" in out
        assert "Beta" not in out

    def test_semantic_json_output(self, services, capsys):
        with patch.object(commands, "_build_services", return_value=services):
            with patch("sys.argv", ["search", "alpha", "--mode", "semantic", "--top-k", "1", "--json"]):
                commands.run_search_cli()

        body = json.loads(capsys.readouterr().out)
        assert body["mode"] == "semantic"
        assert [r["id"] for r in body["results"]] == ["d1"]

    def test_degraded_notice(self, capsys):
        store = InMemoryDocumentStore([make_document("d1", title="Alpha")])
        services = (store, FakeAIClient(), AIClientConfig())
        with patch.object(commands, "_build_services", return_value=services):
            with patch("sys.argv", ["search", "alpha", "--mode", "semantic"]):
                commands.run_search_cli()

        assert "no_embeddings" in capsys.readouterr().out

    def test_no_results(self, services, capsys):
        with patch.object(commands, "_build_services", return_value=services):
            with patch("sys.argv", ["search", "zzz"]):
                commands.run_search_cli()

        assert "No results" in capsys.readouterr().out


class TestAskCli:
    def test_prints_answer(self, services, capsys):
        with patch.object(commands, "_build_services", return_value=services):
            with patch("sys.argv", ["ask", "What is alpha?"]):
                assert commands.run_ask_cli() == 0

        assert capsys.readouterr().out.strip() == "The answer."


class TestEmbedCli:
    def test_prints_local_embedding(self, capsys):
        with patch("sys.argv", ["embed", "hello"]):
            assert commands.run_embed_cli() == 0

        vector = json.loads(capsys.readouterr().out)
        assert len(vector) == EMBEDDING_DIM

    def test_one_line_per_text(self, capsys):
        with patch("sys.argv", ["embed", "alpha", "beta", "gamma"]):
            assert commands.run_embed_cli() == 0

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 3
        assert json.loads(lines[1]) == pytest.approx(local_embed("beta"))

    def test_dimensions(self, capsys):
        with patch("sys.argv", ["embed", "--dimensions", "8", "hello"]):
            assert commands.run_embed_cli() == 0

        assert json.loads(capsys.readouterr().out) == pytest.approx(local_embed("hello", dim=8))

    def test_requires_a_text(self):
        with patch("sys.argv", ["embed"]), pytest.raises(SystemExit):
            commands.run_embed_cli()


class TestServeCli:
    def test_runs_uvicorn(self):
        app = MagicMock()
        with patch("uvicorn.run") as mock_run, patch(
            "knowledge_hub.api.create_app", return_value=app
        ), patch.object(commands, "init_tracing") as mock_tracing:
            with patch("sys.argv", ["serve", "--port", "8080"]):
                assert commands.run_serve_cli() == 0

        mock_tracing.assert_called_once()
        mock_run.assert_called_once_with(app, host="127.0.0.1", port=8080)
