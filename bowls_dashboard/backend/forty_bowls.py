# backend/forty_bowls.py
import datetime
from dataclasses import replace
from typing import Dict, Any, Optional, Tuple

import config
from drills import DrillRules, FORTY_BOWLS_DRAW
from errors import ValidationError
from hands import draw_hand
from marks import DrawMark, FOREHAND, MISS_TYPES, toggle_draw
from scoring import round_half_up, success_percentage
from state import SessionConfig, SideResult, EndRecord

JACKS = ("long_jack", "short_jack")


def _tally(bowls) -> Dict[str, int]:
    counts = {"attempts": len(bowls), "successful": 0}
    counts.update({k: 0 for k in MISS_TYPES})
    for bowl in bowls:
        if bowl.success:
            counts["successful"] += 1
            continue
        for miss, flagged in bowl.misses().items():
            if flagged:
                counts[miss] += 1
    return counts


class FortyBowlsDraw(DrillRules):
    """
    Single player, two bowls to a long jack and two to a short jack each end.
    Nothing is scored head to head; the summary is success rates and miss
    types, split by jack length and by the hand the end was played on.
    """

    drill_type = FORTY_BOWLS_DRAW
    mark_type = DrawMark
    sides = JACKS

    def default_config(self) -> SessionConfig:
        return SessionConfig(
            drill_type=self.drill_type,
            num_ends=config.FORTY_BOWLS_ENDS,
            bowls_per_player=config.BOWLS_PER_JACK * len(JACKS),
        )

    def check_config(self, cfg: SessionConfig) -> SessionConfig:
        if not config.MIN_ENDS <= cfg.num_ends <= config.FORTY_BOWLS_ENDS:
            raise ValidationError(f"number of ends must be between {config.MIN_ENDS} and {config.FORTY_BOWLS_ENDS}")
        if cfg.bowls_per_player != config.BOWLS_PER_JACK * len(JACKS):
            raise ValidationError(f"40 Bowls Draw uses {config.BOWLS_PER_JACK} bowls per jack")
        self._check_no_scoring_rule(cfg)
        self._check_metadata(cfg)
        if not cfg.session_date:
            cfg = replace(cfg, session_date=datetime.date.today().isoformat())
        return cfg

    def initialize_marks(self, cfg: SessionConfig, end_number: int) -> Dict[str, Tuple[DrawMark, ...]]:
        return {jack: tuple(DrawMark() for _ in range(config.BOWLS_PER_JACK)) for jack in JACKS}

    def toggle(self, mark: DrawMark, attribute: str) -> DrawMark:
        return toggle_draw(mark, attribute)

    def evaluate_end(self, end_number: int, marks, adjudication: Dict[str, Any],
                     previous: Optional[EndRecord], cfg: SessionConfig) -> EndRecord:
        hand = draw_hand(end_number - 1)
        sides = {jack: SideResult(marks=tuple(marks[jack]), counts=_tally(marks[jack])) for jack in JACKS}
        return EndRecord(
            end_number=end_number,
            sides=sides,
            context={"hand": hand, "is_forehanded": hand == FOREHAND},
        )

    def compute_statistics(self, ends: Tuple[EndRecord, ...], cfg: SessionConfig) -> Dict[str, Any]:
        miss_types = {k: 0 for k in MISS_TYPES}
        split = {f"{hand}_{jack}": {"total": 0, "successful": 0}
                 for hand in ("forehand", "backhand") for jack in ("long", "short")}
        per_jack = {jack: {"total": 0, "successful": 0} for jack in JACKS}

        for end in ends:
            # stored tag, not recomputed from the end number
            hand = "forehand" if end.context.get("is_forehanded") else "backhand"
            for jack in JACKS:
                counts = _tally(end.side(jack).marks)
                bucket = split[f"{hand}_{jack.split('_')[0]}"]
                for target in (per_jack[jack], bucket):
                    target["total"] += counts["attempts"]
                    target["successful"] += counts["successful"]
                for miss in MISS_TYPES:
                    miss_types[miss] += counts[miss]

        total_bowls = sum(j["total"] for j in per_jack.values())
        successful_bowls = sum(j["successful"] for j in per_jack.values())
        return {
            "ends_played": len(ends),
            "total_bowls": total_bowls,
            "successful_bowls": successful_bowls,
            "percentage": round_half_up(success_percentage(successful_bowls, total_bowls)),
            "miss_types": miss_types,
            **per_jack,
            **split,
        }

    def summary_columns(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "total_bowls": stats["total_bowls"],
            "successful_bowls": stats["successful_bowls"],
            "success_percentage": stats["percentage"],
        }
