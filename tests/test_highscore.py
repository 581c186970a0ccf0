from __future__ import annotations

import json

from block_puzzle_engine.highscore import DEFAULT_KEY, HighScoreStore


def test_missing_file_starts_at_zero(tmp_path):
    store = HighScoreStore(tmp_path / "scores" / "best.json")
    assert store.best == 0
    assert not store.submit(0)
    assert not (tmp_path / "scores" / "best.json").exists()


def test_submit_only_writes_improvements(tmp_path):
    path = tmp_path / "best.json"
    store = HighScoreStore(path)
    assert store.submit(42)
    assert json.loads(path.read_text(encoding="utf-8")) == {DEFAULT_KEY: 42}
    assert not store.submit(40)
    assert store.submit(43)
    assert HighScoreStore(path).best == 43


def test_other_keys_are_kept(tmp_path):
    path = tmp_path / "best.json"
    path.write_text(json.dumps({"other": 7, DEFAULT_KEY: 3}), encoding="utf-8")
    store = HighScoreStore(path)
    assert store.best == 3
    store.submit(10)
    assert json.loads(path.read_text(encoding="utf-8")) == {"other": 7, DEFAULT_KEY: 10}


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "best.json"
    path.write_text("garbage", encoding="utf-8")
    assert HighScoreStore(path).best == 0
    path.write_text("[1, 2]", encoding="utf-8")
    assert HighScoreStore(path).best == 0
