from __future__ import annotations

import json
import random

from block_puzzle_engine.demo import main, play_random
from block_puzzle_engine.game import GameConfig, GameSession
from block_puzzle_engine.game.display import format_grid, format_piece, hex_to_rgb


def test_play_random_stops_at_move_limit():
    session = GameSession(GameConfig(random_seed=0))
    placed = play_random(session, 5, random.Random(0))
    assert placed == 5
    assert session.total_pieces_placed == 5


def test_main_prints_summary_and_records_best(tmp_path, capsys):
    best = tmp_path / "best.json"
    main(["--seed", "3", "--moves", "10", "--quiet", "--highscore", str(best)])
    out = capsys.readouterr().out
    assert "Final board:" in out
    assert "Score:" in out
    assert json.loads(best.read_text(encoding="utf-8"))["bestScore"] > 0


def test_main_with_config_file(tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"game": {"random_seed": 1}}), encoding="utf-8")
    main(["--config", str(config), "--moves", "2", "--highscore", str(tmp_path / "best.json")])
    out = capsys.readouterr().out
    assert "=== Block Puzzle Demo ===" in out
    assert "Move 2:" in out


def test_display_helpers():
    assert format_piece([[1, 0], [1, 1]]) == "█ \n██"
    assert format_grid([[0, 1]]) == "·█"
    assert hex_to_rgb("#00A5E5") == (0, 165, 229)
    assert hex_to_rgb(None) == (200, 200, 200)
