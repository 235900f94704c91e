from random import Random

import pytest

from offworklock.domain.selection import WeightedSelector


class FixedRandom(Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def _pick(items, draw):
    return WeightedSelector(FixedRandom(draw)).pick(items, lambda item: item[1])


def test_pick_returns_none_for_empty_sequence():
    assert WeightedSelector(Random(1)).pick([], lambda item: 1.0) is None


@pytest.mark.parametrize("weights", [[0, 0], [-1, 0, -5]])
def test_pick_returns_none_without_positive_weight(weights):
    items = [(f"item{idx}", weight) for idx, weight in enumerate(weights)]
    assert _pick(items, 0.5) is None


def test_pick_walks_cumulative_weights():
    items = [("a", 1), ("b", 3), ("c", 5)]
    assert _pick(items, 0.0) == ("a", 1)
    assert _pick(items, 0.2) == ("b", 3)
    assert _pick(items, 0.5) == ("c", 5)
    assert _pick(items, 0.999) == ("c", 5)


def test_pick_boundary_is_inclusive():
    items = [("a", 1), ("b", 1)]
    assert _pick(items, 0.5) == ("a", 1)


def test_zero_weight_item_never_wins_on_zero_draw():
    items = [("zero", 0), ("one", 2)]
    assert _pick(items, 0.0) == ("one", 2)


def test_single_positive_weight_always_selected():
    items = [("z1", 0), ("win", 0.25), ("z2", -3), ("z3", 0)]
    selector = WeightedSelector(Random(42))
    picks = {selector.pick(items, lambda item: item[1]) for _ in range(200)}
    assert picks == {("win", 0.25)}


def test_seeded_selection_is_reproducible():
    items = [("a", 1), ("b", 3), ("c", 5)]
    selector_a = WeightedSelector(Random(7))
    selector_b = WeightedSelector(Random(7))
    run_a = [selector_a.pick(items, lambda item: item[1]) for _ in range(50)]
    run_b = [selector_b.pick(items, lambda item: item[1]) for _ in range(50)]
    assert run_a == run_b
