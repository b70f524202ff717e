import pytest

from quote_selector.exceptions import InvalidArgumentError
from quote_selector.possibility import ConditionalPossibility, Possibility
from quote_selector.random_source import SeededRandom


def test_determine_compares_draw_against_weight(scripted):
    possibility = Possibility(0.3, random_source=scripted(0.0, 0.29, 0.3, 0.95))

    assert possibility.weight() == 0.3
    assert [possibility.determine() for _ in range(4)] == [True, True, False, False]


def test_default_weight_is_even_odds():
    assert Possibility().weight() == 0.5


@pytest.mark.parametrize("weight", [-0.1, 1.01, float("nan")])
def test_out_of_range_weight_rejected(weight):
    with pytest.raises(InvalidArgumentError):
        Possibility(weight)


def test_certain_and_impossible_weights():
    always = Possibility(1.0, random_source=SeededRandom(5))
    never = Possibility(0.0, random_source=SeededRandom(5))

    assert all(always.determine() for _ in range(1000))
    assert not any(never.determine() for _ in range(1000))


def test_observed_frequency_tracks_weight():
    possibility = Possibility(0.25, random_source=SeededRandom(42))
    draws = 100_000

    hits = sum(possibility.determine() for _ in range(draws))

    assert abs(hits / draws - 0.25) < 0.01


def test_from_ratio():
    assert Possibility.from_ratio(1, 4).weight() == 0.25
    assert Possibility.from_ratio(0, 3).weight() == 0.0

    with pytest.raises(InvalidArgumentError):
        Possibility.from_ratio(5, 4)
    with pytest.raises(InvalidArgumentError):
        Possibility.from_ratio(1, 0)


def test_conditional_possibility_short_circuits_when_predicate_holds(scripted):
    state = {"forced": True}
    possibility = ConditionalPossibility(
        lambda: state["forced"],
        0.0,
        random_source=scripted(0.5),
    )

    assert possibility.determine() is True
    state["forced"] = False
    assert possibility.determine() is False


def test_conditional_possibility_custom_outcome():
    possibility = ConditionalPossibility(lambda: True, 1.0, outcome=False)

    assert possibility.determine() is False


def test_conditional_possibility_requires_callable():
    with pytest.raises(InvalidArgumentError):
        ConditionalPossibility(None)


def test_weight_just_below_one_still_honours_strict_comparison(scripted):
    weight = 1 - 1e-10
    possibility = Possibility(weight, random_source=scripted(1 - 5e-11, weight, 0.5))

    assert [possibility.determine() for _ in range(3)] == [False, False, True]
