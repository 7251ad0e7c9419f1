# backend/state.py
from dataclasses import dataclass, field, fields, asdict, replace
from typing import List, Dict, Any, Optional, Tuple

from config import DEFAULT_NUM_ENDS, DEFAULT_BOWLS_PER_PLAYER
from errors import ValidationError, TransitionError

SETUP = "setup"
PLAYING = "playing"
END_COMPLETE = "endComplete"
SUMMARY = "summary"


@dataclass(frozen=True)
class SessionConfig:
    drill_type: str
    num_ends: int = DEFAULT_NUM_ENDS
    bowls_per_player: int = DEFAULT_BOWLS_PER_PLAYER
    player_a_name: str = ""
    player_b_name: str = ""
    session_date: str = ""
    surface: str = ""
    weather: Tuple[str, ...] = ()
    notes: str = ""
    scoring_rule: Optional[str] = None  # Lead vs Lead only

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["weather"] = list(self.weather)
        if self.scoring_rule is None:
            del data["scoring_rule"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        weather = values.get("weather", ())
        if isinstance(weather, str):
            # older rows store weather as a ", " joined string
            weather = [w for w in weather.split(", ") if w]
        values["weather"] = tuple(weather)
        return cls(**values)


@dataclass(frozen=True)
class SideResult:
    marks: Tuple[Any, ...]
    counts: Dict[str, int] = field(default_factory=dict)
    points: Optional[int] = None
    cumulative: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marks": [m.to_dict() for m in self.marks],
            "counts": dict(self.counts),
            "points": self.points,
            "cumulative": self.cumulative,
        }


@dataclass(frozen=True)
class EndRecord:
    end_number: int
    sides: Dict[str, SideResult]
    context: Dict[str, Any] = field(default_factory=dict)

    def side(self, name: str) -> SideResult:
        return self.sides[name]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "end_number": self.end_number,
            "sides": {name: side.to_dict() for name, side in self.sides.items()},
            "context": dict(self.context),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], mark_type) -> "EndRecord":
        sides = {}
        for name, side in data["sides"].items():
            sides[name] = SideResult(
                marks=tuple(mark_type.from_dict(m) for m in side.get("marks", [])),
                counts={k: int(v) for k, v in side.get("counts", {}).items()},
                points=side.get("points"),
                cumulative=side.get("cumulative"),
            )
        return cls(end_number=int(data["end_number"]), sides=sides, context=dict(data.get("context", {})))


class DrillSession:
    """
    Drives one drill through setup -> playing -> endComplete -> summary.

    The drill rules object supplies everything variant specific (initial
    marks, toggles, adjudication, end evaluation, statistics); the transition
    logic lives here once. Ends are append-only and statistics are always
    recomputed from them.
    """

    def __init__(self, rules, config: Optional[SessionConfig] = None):
        self.rules = rules
        self.config: SessionConfig = config or rules.default_config()
        self.state: str = SETUP
        self.ends: List[EndRecord] = []
        self.current_end: int = 0  # 0-based index of the open end
        self.marks: Dict[str, Tuple[Any, ...]] = {}
        self.adjudication: Dict[str, Any] = {}

    def _require(self, *states: str):
        if self.state not in states:
            raise TransitionError(f"not allowed in state {self.state!r} (expected {' or '.join(states)})")

    @property
    def end_number(self) -> int:
        return self.current_end + 1

    def configure(self, **changes) -> SessionConfig:
        self._require(SETUP)
        known = {f.name for f in fields(SessionConfig)} - {"drill_type"}
        unknown = set(changes) - known
        if unknown:
            raise ValidationError(f"unknown setup fields: {', '.join(sorted(unknown))}")
        if "weather" in changes:
            changes["weather"] = tuple(changes["weather"] or ())
        self.config = replace(self.config, **changes)
        return self.config

    def start(self):
        """Validate the setup and open end 1. The config is frozen from here."""
        self._require(SETUP)
        self.config = self.rules.check_config(self.config)
        self.ends = []
        self.current_end = 0
        self.marks = self.rules.initialize_marks(self.config, 1)
        self.adjudication = {}
        self.state = PLAYING
        print(f"[DRILL] {self.config.drill_type} started: {self.config.num_ends} ends, "
              f"{self.config.bowls_per_player} bowls")

    def _check_bowl(self, end_index: int, side: str, bowl_index: int):
        if end_index != self.current_end:
            raise ValidationError(f"end {end_index + 1} is not the open end (end {self.end_number})")
        if side not in self.marks:
            raise ValidationError(f"unknown side {side!r}")
        if not 0 <= bowl_index < len(self.marks[side]):
            raise ValidationError(f"bowl index {bowl_index} out of range")

    def toggle_bowl_attribute(self, end_index: int, side: str, bowl_index: int, attribute: str):
        self._require(PLAYING)
        self._check_bowl(end_index, side, bowl_index)
        bowls = list(self.marks[side])
        bowls[bowl_index] = self.rules.toggle(bowls[bowl_index], attribute)
        self.marks = {**self.marks, side: tuple(bowls)}
        return bowls[bowl_index]

    def set_bowl_outcome(self, end_index: int, side: str, bowl_index: int, outcome: str):
        self._require(PLAYING)
        self._check_bowl(end_index, side, bowl_index)
        bowls = list(self.marks[side])
        bowls[bowl_index] = self.rules.set_outcome(bowls[bowl_index], outcome)
        self.marks = {**self.marks, side: tuple(bowls)}
        return bowls[bowl_index]

    def complete_end(self):
        self._require(PLAYING)
        self.adjudication = self.rules.begin_adjudication(self.config)
        self.state = END_COMPLETE

    def set_adjudication(self, **values) -> Dict[str, Any]:
        self._require(END_COMPLETE)
        self.adjudication = self.rules.update_adjudication(self.adjudication, self.config, **values)
        return self.adjudication

    def back_to_edit(self):
        # marks are kept; nothing is appended
        self._require(END_COMPLETE)
        self.state = PLAYING

    def finalize_end(self) -> EndRecord:
        self._require(END_COMPLETE)
        try:
            self.rules.validate_end(self.marks, self.adjudication, self.config)
        except ValidationError as e:
            print(f"[DRILL] End {self.end_number} rejected: {e}")
            raise

        previous = self.ends[-1] if self.ends else None
        record = self.rules.evaluate_end(self.end_number, self.marks, self.adjudication, previous, self.config)
        self.ends.append(record)
        print(f"[DRILL] End {record.end_number} finalized: "
              + ", ".join(f"{k}={v.points}" for k, v in record.sides.items() if v.points is not None))

        self.adjudication = {}
        if len(self.ends) >= self.config.num_ends:
            self.marks = {}
            self.state = SUMMARY
        else:
            self.current_end += 1
            self.marks = self.rules.initialize_marks(self.config, self.end_number)
            self.state = PLAYING
        return record

    def complete_early(self):
        """Jump to summary; the open end's marks are dropped."""
        self._require(PLAYING)
        self.marks = {}
        self.adjudication = {}
        self.state = SUMMARY
        print(f"[DRILL] Completed early after {len(self.ends)}/{self.config.num_ends} ends")

    def reset(self):
        """Back to setup with a fresh default config; the ends are discarded."""
        self.config = self.rules.default_config()
        self.state = SETUP
        self.ends = []
        self.current_end = 0
        self.marks = {}
        self.adjudication = {}

    def load(self, config: SessionConfig, ends: List[EndRecord]):
        """Rehydrate a stored session straight into summary."""
        numbers = [e.end_number for e in ends]
        if numbers != list(range(1, len(ends) + 1)):
            raise ValidationError("stored ends are not numbered 1..n")
        self.config = config
        self.ends = list(ends)
        self.current_end = max(len(ends) - 1, 0)
        self.marks = {}
        self.adjudication = {}
        self.state = SUMMARY

    def statistics(self) -> Dict[str, Any]:
        return self.rules.compute_statistics(tuple(self.ends), self.config)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "drill_type": self.config.drill_type,
            "state": self.state,
            "config": self.config.to_dict(),
            # no open end in summary
            "current_end": None if self.state == SUMMARY else self.end_number,
            "marks": {side: [m.to_dict() for m in bowls] for side, bowls in self.marks.items()},
            "adjudication": dict(self.adjudication),
            "ends": [e.to_dict() for e in self.ends],
            "stats": self.statistics(),
        }
