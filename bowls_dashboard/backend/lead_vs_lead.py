# backend/lead_vs_lead.py
from dataclasses import replace
from typing import Dict, Any, Optional, Tuple

import config
from drills import DrillRules, LEAD_VS_LEAD
from errors import ValidationError
from marks import LeadMark, toggle_lead, set_lead_outcome
from scoring import running_total, determine_winner, winning_side, mean_and_stddev, success_percentage
from state import SessionConfig, SideResult, EndRecord

SIDES = ("A", "B")


def _tally(bowls) -> Dict[str, int]:
    held = sum(1 for b in bowls if b.good)
    crossed = sum(1 for b in bowls if b.crossed)
    short = sum(1 for b in bowls if b.short)
    return {"held": held, "crossed": crossed, "short": short, "penalties": crossed + short}


def award_shots(counts: Dict[str, Dict[str, int]], rule: str,
                adjudication: Dict[str, Any]) -> Tuple[Optional[str], int]:
    """
    Who won shot this end and by how many.

    "count": the side holding strictly more bowls wins as many shots as it
    held; equal held counts award nothing.
    "adjudicated": the winner and shots won entered at end completion.
    """
    if rule == "count":
        held_a, held_b = counts["A"]["held"], counts["B"]["held"]
        if held_a > held_b:
            return "A", held_a
        if held_b > held_a:
            return "B", held_b
        return None, 0
    return adjudication.get("shot_winner"), int(adjudication.get("shots_won", 0))


class LeadVsLead(DrillRules):
    """Two leads, SHOT_POINTS per shot won, minus PENALTY_POINTS per crossed or short bowl."""

    drill_type = LEAD_VS_LEAD
    mark_type = LeadMark
    sides = SIDES

    def default_config(self) -> SessionConfig:
        return SessionConfig(drill_type=self.drill_type, scoring_rule=config.LEAD_SCORING_RULE)

    def check_config(self, cfg: SessionConfig) -> SessionConfig:
        self._check_head_to_head(cfg, config.LEAD_BOWLS_OPTIONS)
        if cfg.scoring_rule is None:
            cfg = replace(cfg, scoring_rule=config.LEAD_SCORING_RULE)
        if cfg.scoring_rule not in config.LEAD_SCORING_RULES:
            raise ValidationError(f"unknown scoring rule {cfg.scoring_rule!r}")
        return cfg

    def initialize_marks(self, cfg: SessionConfig, end_number: int) -> Dict[str, Tuple[LeadMark, ...]]:
        return {side: tuple(LeadMark() for _ in range(cfg.bowls_per_player)) for side in SIDES}

    def toggle(self, mark: LeadMark, attribute: str) -> LeadMark:
        return toggle_lead(mark, attribute)

    def set_outcome(self, mark: LeadMark, outcome: str) -> LeadMark:
        return set_lead_outcome(outcome)

    def begin_adjudication(self, cfg: SessionConfig) -> Dict[str, Any]:
        if cfg.scoring_rule == "count":
            return {}
        return {"shot_winner": None, "shots_won": 1}

    def update_adjudication(self, adjudication: Dict[str, Any], cfg: SessionConfig, **values) -> Dict[str, Any]:
        if cfg.scoring_rule == "count":
            raise ValidationError("count scoring decides shot from held bowls")
        unknown = set(values) - {"shot_winner", "shots_won"}
        if unknown:
            raise ValidationError(f"unknown adjudication fields: {', '.join(sorted(unknown))}")

        updated = dict(adjudication)
        if values.get("shot_winner") is not None:
            if values["shot_winner"] not in SIDES:
                raise ValidationError("shot winner must be 'A' or 'B'")
            updated["shot_winner"] = values["shot_winner"]
        if values.get("shots_won") is not None:
            try:
                shots = int(values["shots_won"])
            except (TypeError, ValueError):
                raise ValidationError("shots won must be a number")
            updated["shots_won"] = max(1, min(cfg.bowls_per_player, shots))
        return updated

    def validate_end(self, marks, adjudication: Dict[str, Any], cfg: SessionConfig):
        if cfg.scoring_rule == "count":
            return
        if adjudication.get("shot_winner") not in SIDES:
            raise ValidationError("Please select which player won shot")
        shots = adjudication.get("shots_won")
        if not isinstance(shots, int) or not 1 <= shots <= cfg.bowls_per_player:
            raise ValidationError(f"shots won must be between 1 and {cfg.bowls_per_player}")

    def evaluate_end(self, end_number: int, marks, adjudication: Dict[str, Any],
                     previous: Optional[EndRecord], cfg: SessionConfig) -> EndRecord:
        counts = {side: _tally(marks[side]) for side in SIDES}
        winner, shots_won = award_shots(counts, cfg.scoring_rule, adjudication)

        sides = {}
        for side in SIDES:
            points = config.SHOT_POINTS * shots_won if side == winner else 0
            points -= config.PENALTY_POINTS * counts[side]["penalties"]
            prior = previous.side(side).cumulative if previous else None
            sides[side] = SideResult(
                marks=tuple(marks[side]),
                counts=counts[side],
                points=points,
                cumulative=running_total(prior, points),
            )
        return EndRecord(
            end_number=end_number,
            sides=sides,
            context={"shot_winner": winner, "shots_won": shots_won, "scoring_rule": cfg.scoring_rule},
        )

    def compute_statistics(self, ends: Tuple[EndRecord, ...], cfg: SessionConfig) -> Dict[str, Any]:
        bowls = len(ends) * cfg.bowls_per_player
        stats: Dict[str, Any] = {"ends_played": len(ends)}
        for side in SIDES:
            results = [end.side(side) for end in ends]
            held = sum(r.counts["held"] for r in results)
            crossed = sum(r.counts["crossed"] for r in results)
            short = sum(r.counts["short"] for r in results)
            average, std_dev = mean_and_stddev(r.points for r in results)
            stats[f"player_{side.lower()}"] = {
                "total_held": held,
                "total_crossed": crossed,
                "total_short": short,
                "total_penalties": crossed + short,
                "held_rate": success_percentage(held, bowls),
                "final_score": results[-1].cumulative if results else 0,
                "average": average,
                "std_dev": std_dev,
            }
        stats["winner"] = determine_winner(
            stats["player_a"]["final_score"], stats["player_b"]["final_score"],
            cfg.player_a_name or "A", cfg.player_b_name or "B",
        )
        stats["winning_side"] = winning_side(stats["player_a"]["final_score"], stats["player_b"]["final_score"])
        return stats

    def summary_columns(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        a, b = stats["player_a"], stats["player_b"]
        return {
            "player_a_final_score": a["final_score"],
            "player_b_final_score": b["final_score"],
            "winner": stats["winner"],
            "player_a_total": a["total_held"],
            "player_b_total": b["total_held"],
            "player_a_total_penalties": a["total_penalties"],
            "player_b_total_penalties": b["total_penalties"],
        }
