# backend/seconds_chance.py
from typing import Dict, Any, Optional, Tuple

import config
from drills import DrillRules, SECONDS_CHANCE
from hands import assign_hand, starts_forehand
from marks import HandMark, FOREHAND, toggle_hand
from scoring import running_total, determine_winner, winning_side, success_percentage
from state import SessionConfig, SideResult, EndRecord

SIDES = ("A", "B")


class SecondsChance(DrillRules):
    """
    Both players bowl half their bowls on one hand and half on the other,
    swapping start hand every end. One point per successful bowl.
    """

    drill_type = SECONDS_CHANCE
    mark_type = HandMark
    sides = SIDES

    def check_config(self, cfg: SessionConfig) -> SessionConfig:
        self._check_head_to_head(cfg, config.SECONDS_CHANCE_BOWLS_OPTIONS)
        self._check_no_scoring_rule(cfg)
        return cfg

    def initialize_marks(self, cfg: SessionConfig, end_number: int) -> Dict[str, Tuple[HandMark, ...]]:
        return {
            side: tuple(HandMark(hand=assign_hand(end_number, i, side, cfg.bowls_per_player))
                        for i in range(cfg.bowls_per_player))
            for side in SIDES
        }

    def toggle(self, mark: HandMark, attribute: str) -> HandMark:
        return toggle_hand(mark, attribute)

    def evaluate_end(self, end_number: int, marks, adjudication: Dict[str, Any],
                     previous: Optional[EndRecord], cfg: SessionConfig) -> EndRecord:
        sides = {}
        for side in SIDES:
            successful = sum(1 for b in marks[side] if b.success)
            prior = previous.side(side).cumulative if previous else None
            sides[side] = SideResult(
                marks=tuple(marks[side]),
                counts={"successful": successful},
                points=successful,
                cumulative=running_total(prior, successful),
            )
        return EndRecord(
            end_number=end_number,
            sides=sides,
            context={"player_a_started_forehand": starts_forehand(end_number, "A")},
        )

    def compute_statistics(self, ends: Tuple[EndRecord, ...], cfg: SessionConfig) -> Dict[str, Any]:
        bowls = len(ends) * cfg.bowls_per_player
        stats: Dict[str, Any] = {"ends_played": len(ends)}
        for side in SIDES:
            results = [end.side(side) for end in ends]
            forehand = backhand = 0
            for result in results:
                for bowl in result.marks:
                    if not bowl.success:
                        continue
                    # hand as recorded on the bowl
                    if bowl.hand == FOREHAND:
                        forehand += 1
                    else:
                        backhand += 1
            successful = sum(r.counts["successful"] for r in results)
            stats[f"player_{side.lower()}"] = {
                "total_successful": successful,
                "forehand_success": forehand,
                "backhand_success": backhand,
                "success_rate": success_percentage(successful, bowls),
                "final_score": results[-1].cumulative if results else 0,
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
            "player_a_total": a["total_successful"],
            "player_b_total": b["total_successful"],
            "player_a_forehand_success": a["forehand_success"],
            "player_a_backhand_success": a["backhand_success"],
            "player_b_forehand_success": b["forehand_success"],
            "player_b_backhand_success": b["backhand_success"],
        }
