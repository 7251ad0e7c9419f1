# backend/hands.py
from marks import FOREHAND, BACKHAND

PLAYERS = ("A", "B")


def assign_hand(end_number: int, bowl_index: int, player: str, bowls_per_player: int = 4) -> str:
    """
    Hand for one bowl in a 2nd's Chance end.

    end_number is 1-based, bowl_index 0-based. Player A starts forehand on odd
    ends and switches hands halfway through their bowls; player B is always on
    the opposite hand. bowls_per_player must be even.
    """
    if bowls_per_player <= 0 or bowls_per_player % 2:
        raise ValueError(f"bowls_per_player must be a positive even number (got {bowls_per_player})")
    if end_number < 1:
        raise ValueError(f"end_number must be >= 1 (got {end_number})")
    if not 0 <= bowl_index < bowls_per_player:
        raise ValueError(f"bowl_index {bowl_index} out of range for {bowls_per_player} bowls")
    if player not in PLAYERS:
        raise ValueError(f"player must be 'A' or 'B' (got {player!r})")

    is_odd_end = end_number % 2 == 1
    is_first_half = bowl_index < bowls_per_player // 2
    a_forehand = is_odd_end == is_first_half
    if player == "A":
        return FOREHAND if a_forehand else BACKHAND
    return BACKHAND if a_forehand else FOREHAND


def starts_forehand(end_number: int, player: str = "A") -> bool:
    return assign_hand(end_number, 0, player, 2) == FOREHAND


def draw_hand(end_index: int) -> str:
    # 40 Bowls Draw alternates whole ends: even 0-based end index is forehand
    return FOREHAND if end_index % 2 == 0 else BACKHAND
