import logging

import pytest

import webstore_stats
from core.storage import ItemStore
from fetchers.chrome_store import FetchError


@pytest.fixture
def cli_store(tmp_path, monkeypatch):
    db_path = str(tmp_path / "cli.sqlite3")
    monkeypatch.setattr(webstore_stats, "ItemStore", lambda: ItemStore(db_path=db_path))
    return db_path


def test_no_flags_prints_usage(cli_store, capsys):
    assert webstore_stats.main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_flags_are_mutually_exclusive(cli_store):
    with pytest.raises(SystemExit) as exc:
        webstore_stats.main(["-d", "-c"])
    assert exc.value.code == 2


def test_category_requires_download(cli_store):
    with pytest.raises(SystemExit):
        webstore_stats.main(["-c", "--category", "ext/games"])


def test_download_flag_runs_download(cli_store, monkeypatch):
    calls = []
    monkeypatch.setattr(
        webstore_stats,
        "download_all",
        lambda store, categories=None: calls.append((store.db_path, categories)) or 0,
    )

    assert webstore_stats.main(["-d", "--category", "ext/games"]) == 0
    assert calls == [(cli_store, ["ext/games"])]


def test_csv_flag_runs_export(cli_store, monkeypatch):
    calls = []
    monkeypatch.setattr(
        webstore_stats,
        "write_csv",
        lambda store, path: calls.append((store.count(), path)) or 0,
    )

    assert webstore_stats.main(["--csv"]) == 0
    assert calls == [(0, webstore_stats.CSV_PATH)]


def test_cli_fatal_error_logs_and_exits_2(cli_store, monkeypatch, caplog):
    def fail(store, categories=None):
        raise FetchError("down")

    monkeypatch.setattr(webstore_stats, "download_all", fail)

    with pytest.raises(SystemExit) as exc:
        webstore_stats.cli(["-d"])

    assert exc.value.code == 2
    assert "Fatal webstore_stats error: down" in caplog.text


def test_cli_success_exits_0(cli_store):
    with pytest.raises(SystemExit) as exc:
        webstore_stats.cli([])
    assert exc.value.code == 0


def test_verbose_switches_to_debug(cli_store, monkeypatch):
    levels = []
    monkeypatch.setattr(webstore_stats, "set_level", levels.append)

    assert webstore_stats.main(["-v"]) == 0
    assert levels == [logging.DEBUG]
