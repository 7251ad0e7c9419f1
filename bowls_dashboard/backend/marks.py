# backend/marks.py
from dataclasses import dataclass, asdict, replace
from typing import Dict, Any

from errors import ValidationError

FOREHAND = "forehand"
BACKHAND = "backhand"
HANDS = (FOREHAND, BACKHAND)

MISS_TYPES = ("short", "long", "wide", "narrow")
LEAD_OUTCOMES = ("held", "crossed", "short", "none")


@dataclass(frozen=True)
class DrawMark:
    """One 40 Bowls Draw bowl: success or any combination of miss types."""
    success: bool = False
    short: bool = False
    long: bool = False
    wide: bool = False
    narrow: bool = False

    def misses(self) -> Dict[str, bool]:
        return {k: getattr(self, k) for k in MISS_TYPES}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DrawMark":
        return cls(**{k: bool(data.get(k, False)) for k in ("success",) + MISS_TYPES})


@dataclass(frozen=True)
class LeadMark:
    """One Lead vs Lead bowl. `good` means the bowl held shot."""
    good: bool = False
    crossed: bool = False
    short: bool = False

    @property
    def outcome(self) -> str:
        if self.good:
            return "held"
        if self.crossed:
            return "crossed"
        if self.short:
            return "short"
        return "none"

    @property
    def penalties(self) -> int:
        return int(self.crossed) + int(self.short)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeadMark":
        return cls(
            good=bool(data.get("good", False)),
            crossed=bool(data.get("crossed", False)),
            short=bool(data.get("short", False)),
        )


@dataclass(frozen=True)
class HandMark:
    """One 2nd's Chance bowl, tagged with the hand it was played on."""
    hand: str = FOREHAND
    success: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HandMark":
        hand = data.get("hand", FOREHAND)
        if hand not in HANDS:
            raise ValidationError(f"unknown hand {hand!r}")
        return cls(hand=hand, success=bool(data.get("success", False)))


def toggle_draw(mark: DrawMark, attribute: str) -> DrawMark:
    """
    Returns a new DrawMark with `attribute` flipped.

    Success clears every miss type. Miss types are ignored while the bowl is
    marked successful; short/long and wide/narrow are exclusive pairs.
    """
    if attribute == "success":
        if mark.success:
            return replace(mark, success=False)
        return DrawMark(success=True)

    if attribute not in MISS_TYPES:
        raise ValidationError(f"unknown attribute {attribute!r}")
    if mark.success:
        return mark

    value = not getattr(mark, attribute)
    changes = {attribute: value}
    if value:
        opposite = {"short": "long", "long": "short", "wide": "narrow", "narrow": "wide"}[attribute]
        changes[opposite] = False
    return replace(mark, **changes)


def toggle_lead(mark: LeadMark, attribute: str) -> LeadMark:
    """Held clears both penalties; either penalty clears held."""
    if attribute == "good":
        if mark.good:
            return replace(mark, good=False)
        return LeadMark(good=True)
    if attribute not in ("crossed", "short"):
        raise ValidationError(f"unknown attribute {attribute!r}")

    value = not getattr(mark, attribute)
    if value:
        return replace(mark, good=False, **{attribute: True})
    return replace(mark, **{attribute: False})


def set_lead_outcome(outcome: str) -> LeadMark:
    # single exclusive state per bowl, used by count scoring
    if outcome == "held":
        return LeadMark(good=True)
    if outcome == "crossed":
        return LeadMark(crossed=True)
    if outcome == "short":
        return LeadMark(short=True)
    if outcome == "none":
        return LeadMark()
    raise ValidationError(f"unknown outcome {outcome!r}")


def toggle_hand(mark: HandMark, attribute: str) -> HandMark:
    if attribute != "success":
        raise ValidationError(f"unknown attribute {attribute!r}")
    return replace(mark, success=not mark.success)
