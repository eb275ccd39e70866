# tests/test_scripts.py
"""
CLI script tests:
  - suggest_cli with a local JSON candidate file (no DB)
  - suggest_cli with a mocked Supabase client (upstream failure path)
  - add_event dry-run / write / invalid
"""
from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from scripts import add_event, suggest_cli


ROWS = [
    {
        "id": "A", "name": "Catan Night", "tags": ["board game", "social"],
        "start_ts": "2025-01-02T19:00:00Z", "end_ts": "2025-01-02T21:00:00Z",
        "attendees": ["u"] * 10,
    },
    {
        "id": "B", "name": "Trivia Night", "tags": ["board game", "trivia"],
        "start_ts": "2025-01-02T19:00:00Z", "end_ts": "2025-01-02T21:00:00Z",
        "attendees": ["u"] * 2,
    },
    {
        "id": "C", "name": "Beach Volleyball", "tags": ["volleyball"],
        "start_ts": "2025-01-02T20:00:00Z", "end_ts": "2025-01-03T00:00:00Z",
        "attendees": ["u"] * 5,
    },
]

BASE_ARGS = [
    "--start", "2025-01-02T18:00:00Z",
    "--end", "2025-01-02T22:00:00Z",
    "--tags", "board game, volleyball",
]


@pytest.fixture
def events_file(tmp_path):
    p = tmp_path / "events.json"
    p.write_text(json.dumps(ROWS), encoding="utf-8")
    return str(p)


@pytest.fixture(autouse=True)
def _clean_rank_env(monkeypatch):
    for var in (
        "RANK_STRATEGY", "RANK_TIME_FIT_POLICY", "RANK_W_TEXT", "RANK_W_TIME",
        "RANK_W_POP", "RANK_MMR_LAMBDA", "RANK_POOL_CAP", "RANK_MIN_TIME_FIT",
    ):
        monkeypatch.delenv(var, raising=False)


# ===========================================================================
# suggest_cli
# ===========================================================================

class TestSuggestCli:

    def test_json_output_from_file(self, events_file, capsys):
        rc = suggest_cli.main(BASE_ARGS + ["-k", "2", "--events-json", events_file, "--json"])
        assert rc == 0
        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{"):])
        assert payload["status"] == "ok"
        assert [s["id"] for s in payload["suggestions"]] == ["A", "C"]

    def test_text_output(self, events_file, capsys):
        rc = suggest_cli.main(BASE_ARGS + ["-k", "1", "--events-json", events_file])
        assert rc == 0
        out = capsys.readouterr().out
        assert "=== suggestions (ok) ===" in out
        assert "1. Catan Night" in out

    def test_wrapped_events_object(self, tmp_path, capsys):
        p = tmp_path / "wrapped.json"
        p.write_text(json.dumps({"events": ROWS[:1]}), encoding="utf-8")
        rc = suggest_cli.main(BASE_ARGS + ["--events-json", str(p), "--json"])
        assert rc == 0
        assert '"A"' in capsys.readouterr().out

    def test_invalid_query_exit_code(self, events_file, capsys):
        rc = suggest_cli.main([
            "--start", "2025-01-02T22:00:00Z", "--end", "2025-01-02T18:00:00Z",
            "--tags", "board game", "--events-json", events_file,
        ])
        assert rc == 2
        assert "window_end_not_after_start" in capsys.readouterr().out

    def test_no_overlap_is_success(self, events_file, capsys):
        rc = suggest_cli.main([
            "--start", "2025-01-05T08:00:00Z", "--end", "2025-01-05T09:00:00Z",
            "--tags", "board game", "--events-json", events_file,
        ])
        assert rc == 0
        assert "no_overlap" in capsys.readouterr().out

    def test_semantic_strategy_from_file(self, events_file):
        rc = suggest_cli.main(BASE_ARGS + ["--strategy", "semantic", "--events-json", events_file])
        assert rc == 0

    def test_bad_env_config(self, events_file, monkeypatch, capsys):
        monkeypatch.setenv("RANK_W_TEXT", "lots")
        rc = suggest_cli.main(BASE_ARGS + ["--events-json", events_file])
        assert rc == 2
        assert "CONFIG_ERROR" in capsys.readouterr().out

    def test_bad_timestamp_rejected_by_argparse(self):
        with pytest.raises(SystemExit):
            suggest_cli.main(["--start", "soon", "--end", "later", "--tags", "x"])

    def test_supabase_failure_is_upstream_error(self, capsys):
        with patch(
            "eventrec.db.supabase_client.get_supabase_client",
            side_effect=RuntimeError("Missing SUPABASE env vars"),
        ):
            rc = suggest_cli.main(BASE_ARGS)
        assert rc == 1
        assert "UPSTREAM_ERROR" in capsys.readouterr().out

    def test_supabase_candidates(self, capsys):
        sb = MagicMock()
        builder = MagicMock()
        for method in ["select", "lt", "gt", "order", "limit"]:
            getattr(builder, method).return_value = builder
        sb.table.return_value = builder
        builder.execute.return_value.data = ROWS
        with patch("eventrec.db.supabase_client.get_supabase_client", return_value=sb):
            rc = suggest_cli.main(BASE_ARGS + ["-k", "2", "--json"])
        assert rc == 0
        sb.table.assert_called_once_with("events")
        assert '"C"' in capsys.readouterr().out


# ===========================================================================
# add_event
# ===========================================================================

ADD_ARGS = [
    "--name", "Catan Night", "--tags", "Board Game, social",
    "--start", "2025-01-02T19:00:00Z", "--end", "2025-01-02T21:00:00Z",
]


class TestAddEvent:

    def test_dry_run_does_not_touch_db(self, capsys):
        with patch("eventrec.db.supabase_client.get_supabase_client") as get_client:
            rc = add_event.main(ADD_ARGS)
        assert rc == 0
        get_client.assert_not_called()
        out = capsys.readouterr().out
        assert "[DRY_RUN]" in out
        assert "board game" in out

    def test_invalid_range(self, capsys):
        rc = add_event.main([
            "--name", "Late", "--start", "2025-01-02T21:00:00Z", "--end", "2025-01-02T19:00:00Z",
        ])
        assert rc == 2
        assert "End must be after start" in capsys.readouterr().out

    def test_write_inserts(self, capsys):
        sb = MagicMock()
        builder = MagicMock()
        builder.insert.return_value = builder
        sb.table.return_value = builder
        builder.execute.return_value.data = [{"id": "new-id", "name": "Catan Night"}]
        with patch("eventrec.db.supabase_client.get_supabase_client", return_value=sb):
            rc = add_event.main(ADD_ARGS + ["--write"])
        assert rc == 0
        assert "saved id=new-id" in capsys.readouterr().out


# ===========================================================================
# suggest_cli: synonym file + flag/env precedence
# ===========================================================================

class TestSuggestCliConfig:

    @pytest.mark.parametrize("content", [None, "{not json", "[1, 2]"])
    def test_bad_synonyms_file_is_config_error(self, events_file, tmp_path, monkeypatch, capsys, content):
        p = tmp_path / "synonyms.json"
        if content is not None:
            p.write_text(content, encoding="utf-8")
        monkeypatch.setattr("eventrec.config.SYNONYMS_PATH", str(p))

        rc = suggest_cli.main(BASE_ARGS + ["--events-json", events_file])
        assert rc == 2
        assert "[suggest] CONFIG_ERROR" in capsys.readouterr().out

    def test_custom_synonyms_file_is_used(self, events_file, tmp_path, monkeypatch, capsys):
        p = tmp_path / "synonyms.json"
        p.write_text(json.dumps({"sand": ["volleyball"]}), encoding="utf-8")
        monkeypatch.setattr("eventrec.config.SYNONYMS_PATH", str(p))

        rc = suggest_cli.main([
            "--start", "2025-01-02T18:00:00Z", "--end", "2025-01-02T22:00:00Z",
            "--tags", "sand", "-k", "1", "--events-json", events_file, "--json",
        ])
        assert rc == 0
        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{"):])
        assert payload["suggestions"][0]["id"] == "C"
        assert not payload["suggestions"][0]["reason"].startswith("No lexical match")

    def test_strategy_flag_keeps_env_weights(self, events_file, monkeypatch):
        from eventrec.ranking import pipeline

        monkeypatch.setenv("RANK_W_TEXT", "0.4")
        monkeypatch.setenv("RANK_W_TIME", "0.4")
        monkeypatch.setenv("RANK_W_POP", "0.2")
        with patch("eventrec.ranking.pipeline.rank", wraps=pipeline.rank) as spy:
            rc = suggest_cli.main(BASE_ARGS + ["--strategy", "semantic", "--events-json", events_file])
        assert rc == 0
        cfg = spy.call_args[0][2]
        assert cfg.strategy == "semantic"
        assert (cfg.w_text, cfg.w_time, cfg.w_pop) == (0.4, 0.4, 0.2)

    def test_strategy_flag_without_env_weights_uses_reference(self, events_file):
        from eventrec.ranking import pipeline

        with patch("eventrec.ranking.pipeline.rank", wraps=pipeline.rank) as spy:
            suggest_cli.main(BASE_ARGS + ["--strategy", "semantic", "--events-json", events_file])
        cfg = spy.call_args[0][2]
        assert (cfg.w_text, cfg.w_time, cfg.w_pop) == (0.6, 0.2, 0.2)

    def test_policy_flag_keeps_env_threshold(self, events_file, monkeypatch):
        from eventrec.ranking import pipeline

        monkeypatch.setenv("RANK_MIN_TIME_FIT", "0.3")
        with patch("eventrec.ranking.pipeline.rank", wraps=pipeline.rank) as spy:
            suggest_cli.main(BASE_ARGS + ["--time-fit-policy", "overlap", "--events-json", events_file])
        cfg = spy.call_args[0][2]
        assert cfg.time_fit_policy == "overlap"
        assert cfg.time_fit_threshold == 0.3
