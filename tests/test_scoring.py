import pytest

from scoring import running_total, determine_winner, winning_side, round_half_up, success_percentage, mean_and_stddev


def test_running_total_starts_from_zero() -> None:
    assert running_total(None, 4) == 4
    assert running_total(4, -2) == 2


@pytest.mark.parametrize(
    "a, b, expected",
    [(5, 3, "Ann"), (3, 5, "Bob"), (4, 4, "Draw"), (0, 0, "Draw"), (-1, -3, "Ann")],
)
def test_determine_winner(a: int, b: int, expected: str) -> None:
    assert determine_winner(a, b, "Ann", "Bob") == expected


@pytest.mark.parametrize("a, b, expected", [(5, 3, "A"), (3, 5, "B"), (4, 4, None), (0, 0, None)])
def test_winning_side(a: int, b: int, expected) -> None:
    assert winning_side(a, b) == expected


def test_round_half_up() -> None:
    assert round_half_up(12.5) == 13
    assert round_half_up(62.4) == 62
    assert round_half_up(0.0) == 0


def test_success_percentage_guards_zero_attempts() -> None:
    assert success_percentage(0, 0) == 0.0
    assert success_percentage(3, 4) == 75.0


def test_population_stddev() -> None:
    mean, std = mean_and_stddev([2, 4, 4, 4, 5, 5, 7, 9])
    assert mean == 5.0
    assert std == 2.0


def test_stddev_of_nothing_is_zero() -> None:
    assert mean_and_stddev([]) == (0.0, 0.0)
