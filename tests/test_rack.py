"""
Rack layout tests — slot geometry, racking rules, shuffle behaviour.

8-ball: 8 in the centre, back corners one solid + one stripe.
9-ball: 1 on the apex, 9 in the centre.
"""

import math
from collections import Counter

import pytest

from rack import (
    TRIANGLE_ROWS, DIAMOND_ROWS, check_mode, diamond_slots, number_at, rack_8, rack_9,
    rack_for_mode, shuffle, slot_index, slots_for_mode, triangle_slots,
)
from rng import Mulberry32, rng_for
from table import BALL_DIAMETER, CENTER_Y, FOOT_SPOT_X, ROW_SPACING, SOLIDS, STRIPES

SEEDS = range(300)


class TestSlots:

    def test_triangle_has_fifteen_slots(self):
        slots = triangle_slots()
        assert len(slots) == 15
        assert [sum(1 for s in slots if s.row == r) for r in range(5)] == list(TRIANGLE_ROWS)

    def test_diamond_has_nine_slots(self):
        slots = diamond_slots()
        assert len(slots) == 9
        assert [sum(1 for s in slots if s.row == r) for r in range(5)] == list(DIAMOND_ROWS)

    @pytest.mark.parametrize("slots_fn", [triangle_slots, diamond_slots])
    def test_apex_on_foot_spot(self, slots_fn):
        apex = slots_fn()[slot_index(slots_fn(), 0, 0)]
        assert apex.x == FOOT_SPOT_X
        assert apex.y == CENTER_Y

    @pytest.mark.parametrize("slots_fn", [triangle_slots, diamond_slots])
    def test_rows_centred_and_packed(self, slots_fn):
        slots = slots_fn()
        for row in range(5):
            ys = sorted(s.y for s in slots if s.row == row)
            xs = {s.x for s in slots if s.row == row}
            assert xs == {FOOT_SPOT_X - row * ROW_SPACING}
            assert (ys[0] + ys[-1]) / 2 == pytest.approx(CENTER_Y)
            for a, b in zip(ys, ys[1:]):
                assert b - a == pytest.approx(BALL_DIAMETER)

    def test_adjacent_rows_touch(self):
        slots = triangle_slots()
        a = slots[slot_index(slots, 0, 0)]
        b = slots[slot_index(slots, 1, 0)]
        assert math.hypot(a.x - b.x, a.y - b.y) == pytest.approx(BALL_DIAMETER)

    def test_missing_slot(self):
        with pytest.raises(KeyError):
            slot_index(diamond_slots(), 4, 2)


class TestShuffle:

    def test_permutation(self):
        items = list(range(20))
        shuffle(Mulberry32(3), items)
        assert sorted(items) == list(range(20))

    def test_one_draw_per_swap(self):
        g = Mulberry32(11)
        shuffle(g, list(range(13)))
        assert g.draws == 12

    def test_trivial_lists_consume_nothing(self):
        g = Mulberry32(11)
        shuffle(g, [])
        shuffle(g, [1])
        assert g.draws == 0


class TestRack8:

    @pytest.mark.parametrize("seed", SEEDS)
    def test_rules(self, seed):
        slots = triangle_slots()
        balls = rack_8(rng_for(seed))

        assert sorted(b.number for b in balls) == list(range(1, 16))
        assert number_at(balls, slots, 2, 1) == 8

        corners = {number_at(balls, slots, 4, 0), number_at(balls, slots, 4, 4)}
        assert len(corners & set(SOLIDS)) == 1, f"seed={seed} corners={corners}"
        assert len(corners & set(STRIPES)) == 1, f"seed={seed} corners={corners}"

    def test_balls_sit_on_slots(self):
        slots = triangle_slots()
        balls = rack_8(rng_for(1))
        assert [(b.x, b.y) for b in balls] == [(s.x, s.y) for s in slots]

    def test_corner_side_is_a_fair_coin(self):
        slots = triangle_slots()
        stripe_left = sum(
            number_at(rack_8(rng_for(seed)), slots, 4, 0) in STRIPES for seed in range(2000)
        )
        assert 800 < stripe_left < 1200, f"stripe on left in {stripe_left}/2000 racks"

    def test_open_slots_uniform(self):
        """Each non-8 number fills each of the 12 open slots in about 1/14 of racks."""
        slots = triangle_slots()
        fixed = {slot_index(slots, 2, 1), slot_index(slots, 4, 0), slot_index(slots, 4, 4)}
        free = [i for i in range(len(slots)) if i not in fixed]
        assert len(free) == 12

        runs = 4000
        counts = Counter()
        for seed in range(runs):
            balls = rack_8(rng_for(seed))
            for idx in free:
                counts[(idx, balls[idx].number)] += 1

        expected = runs / 14
        for idx in free:
            for number in SOLIDS + STRIPES:
                c = counts[(idx, number)]
                assert 0.75 * expected < c < 1.25 * expected, (
                    f"slot {idx} number {number}: {c} vs expected {expected:.0f}"
                )


class TestRack9:

    @pytest.mark.parametrize("seed", SEEDS)
    def test_rules(self, seed):
        slots = diamond_slots()
        balls = rack_9(rng_for(seed))

        assert sorted(b.number for b in balls) == list(range(1, 10))
        assert number_at(balls, slots, 0, 0) == 1
        assert number_at(balls, slots, 2, 1) == 9

    def test_free_slots_uniform(self):
        """Every number 2-8 shows up in every free slot about equally often."""
        slots = diamond_slots()
        fixed = {slot_index(slots, 0, 0), slot_index(slots, 2, 1)}
        free = [i for i in range(len(slots)) if i not in fixed]

        runs = 3000
        counts = Counter()
        for seed in range(runs):
            balls = rack_9(rng_for(seed))
            for idx in free:
                counts[(idx, balls[idx].number)] += 1

        expected = runs / 7
        for idx in free:
            for number in range(2, 9):
                c = counts[(idx, number)]
                assert 0.75 * expected < c < 1.25 * expected, (
                    f"slot {idx} number {number}: {c} vs expected {expected:.0f}"
                )


class TestModes:

    def test_rack_for_mode(self):
        assert len(rack_for_mode("8", rng_for(1))) == 15
        assert len(rack_for_mode("9", rng_for(1))) == 9
        assert len(slots_for_mode("9")) == 9

    @pytest.mark.parametrize("mode", ["10", "", "eight", None])
    def test_unknown_mode(self, mode):
        with pytest.raises(ValueError):
            check_mode(mode)

    def test_mode_is_stripped(self):
        assert check_mode(" 9 ") == "9"
