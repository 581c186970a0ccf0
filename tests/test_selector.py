from __future__ import annotations

import random
from collections import Counter

import pytest

from block_puzzle_engine.exceptions import ConfigError, SessionStateError
from block_puzzle_engine.game import PieceSelector, SelectorConfig, ShapeLibrary, default_library

from conftest import ScriptedRandom


def test_refill_copies_follow_weights():
    selector = PieceSelector(default_library(), random.Random(0))
    selector.refill_bag()
    counts = Counter(selector.bag)
    assert counts == {
        "I": 4, "O2": 4, "T": 4, "S": 4, "Z": 4, "J": 4, "L": 4,
        "U": 3, "L5": 3, "O1": 1, "O3": 2,
    }
    for name in default_library():
        assert counts[name] == selector.copies_for(name)


def test_copies_round_half_up_with_floor_of_one():
    lib = ShapeLibrary.from_table({
        "A": ([[1]], "#000000", 0.625),
        "B": ([[1, 1]], "#111111", 0.05),
    })
    selector = PieceSelector(lib, random.Random(0))
    assert selector.copies_for("A") == 3
    assert selector.copies_for("B") == 1


def test_bag_shrinks_by_one_per_pick():
    selector = PieceSelector(default_library(), random.Random(11))
    selector.pick_family()
    assert len(selector.bag) == 36
    for expected in range(35, -1, -1):
        selector.pick_family()
        assert len(selector.bag) == expected
    assert selector.bag == []
    # an empty bag is refilled before the next draw
    selector.pick_family()
    assert len(selector.bag) == 36


def test_drought_counters_reset_and_increment():
    selector = PieceSelector(default_library(), random.Random(5))
    for _ in range(60):
        before = dict(selector.drought)
        picked = selector.pick_family(["T"])
        assert selector.drought[picked] == 0
        for name, value in before.items():
            if name != picked:
                assert selector.drought[name] == value + 1


def test_drought_modifier():
    selector = PieceSelector(default_library(), random.Random(0))
    selector.drought["O1"] = 8
    assert selector.drought_modifier("O1") == pytest.approx(1.0)
    selector.drought["O1"] = 10
    assert selector.drought_modifier("O1") == pytest.approx(1.3)
    selector.drought["O1"] = 3
    assert selector.drought_modifier("O1") == pytest.approx(1.0)


def test_duplicates_in_hand_suppress_weight():
    selector = PieceSelector(default_library(), random.Random(0))
    assert selector.candidate_weight("I", []) == pytest.approx(1.0)
    assert selector.candidate_weight("I", ["I"]) == pytest.approx(0.4)
    assert selector.candidate_weight("I", ["I", "T", "I"]) == pytest.approx(0.16)
    assert selector.candidate_weight("S", ["I"]) == pytest.approx(0.9)


def test_rejected_attempts_do_not_touch_bag_and_last_attempt_is_forced():
    lib = default_library().subset(["I", "O1"])
    rng = ScriptedRandom(randrange_values=[2, 0, 1], random_values=[0.99, 0.99])
    selector = PieceSelector(lib, rng)
    selector.bag = ["I", "I", "O1"]

    picked = selector.pick_family(["I"])

    # O1 (0.3) and I (0.4 with one in hand) both fail the 0.99 draw
    assert picked == "I"
    assert selector.bag == ["I", "O1"]
    assert rng.random_values == []
    assert selector.drought == {"I": 0, "O1": 1}


def test_first_attempt_accepted_when_draw_below_weight():
    lib = default_library().subset(["I", "O1"])
    rng = ScriptedRandom(randrange_values=[2], random_values=[0.1])
    selector = PieceSelector(lib, rng)
    selector.bag = ["I", "I", "O1"]
    assert selector.pick_family([]) == "O1"
    assert selector.bag == ["I", "I"]


def test_drought_boost_can_lift_weight_over_one():
    lib = default_library().subset(["I", "O1"])
    rng = ScriptedRandom(randrange_values=[0, 0], random_values=[0.5, 0.0])
    selector = PieceSelector(lib, rng)
    selector.bag = ["O1", "I"]
    selector.drought["O1"] = 12
    # 0.3 * 1.6 = 0.48 < 0.5: rejected, the second attempt takes O1 again
    assert selector.drought_modifier("O1") == pytest.approx(1.6)
    assert selector.pick_family([]) == "O1"
    assert selector.bag == ["I"]


def test_history_is_bounded():
    selector = PieceSelector(default_library(), random.Random(2))
    picks = [selector.pick_family() for _ in range(30)]
    assert len(selector.history) == 20
    assert list(selector.history) == picks[-20:]


def test_next_piece_uses_family_rotation_and_color():
    selector = PieceSelector(default_library(), random.Random(9))
    for _ in range(40):
        piece = selector.next_piece()
        family = default_library()[piece.family]
        assert family.has_rotation(piece.shape)
        assert piece.color == family.color
        assert piece.code == family.code


def test_seeded_selectors_agree():
    a = PieceSelector(default_library(), random.Random(3))
    b = PieceSelector(default_library(), random.Random(3))
    assert [a.pick_family() for _ in range(50)] == [b.pick_family() for _ in range(50)]


def test_reset_clears_selection_state():
    selector = PieceSelector(default_library(), random.Random(1))
    for _ in range(5):
        selector.pick_family()
    selector.reset()
    assert selector.bag == []
    assert set(selector.drought.values()) == {0}
    assert len(selector.history) == 0


def test_state_round_trip_and_validation():
    selector = PieceSelector(default_library(), random.Random(4))
    for _ in range(7):
        selector.pick_family()
    state = selector.state_dict()
    other = PieceSelector(default_library(), random.Random(0))
    other.load_state(state)
    assert other.state_dict() == state
    with pytest.raises(SessionStateError):
        other.load_state({"bag": ["nope"]})


def test_invalid_config():
    with pytest.raises(ConfigError):
        PieceSelector(default_library(), random.Random(0), SelectorConfig(max_attempts=0))
    with pytest.raises(ConfigError):
        SelectorConfig(duplicate_penalty=1.5).validate()
