# backend/drills.py
from typing import Dict, Any, Optional, Tuple

import config
from errors import ValidationError
from scoring import DRAW
from state import SessionConfig, EndRecord

FORTY_BOWLS_DRAW = "40-bowls-draw"
LEAD_VS_LEAD = "lead-vs-lead"
SECONDS_CHANCE = "seconds-chance"
DRILL_TYPES = (FORTY_BOWLS_DRAW, LEAD_VS_LEAD, SECONDS_CHANCE)


class DrillRules:
    """
    Scoring rules for one drill variant, plugged into a DrillSession.

    Subclasses set drill_type/mark_type and implement initialize_marks,
    toggle, evaluate_end and compute_statistics. Adjudication hooks default
    to "this drill has none".
    """

    drill_type = ""
    mark_type = None
    sides: Tuple[str, ...] = ("A", "B")

    def default_config(self) -> SessionConfig:
        return SessionConfig(drill_type=self.drill_type)

    def check_config(self, cfg: SessionConfig) -> SessionConfig:
        raise NotImplementedError

    def initialize_marks(self, cfg: SessionConfig, end_number: int) -> Dict[str, Tuple[Any, ...]]:
        raise NotImplementedError

    def toggle(self, mark, attribute: str):
        raise NotImplementedError

    def set_outcome(self, mark, outcome: str):
        raise ValidationError(f"{self.drill_type} has no per-bowl outcome setter")

    def begin_adjudication(self, cfg: SessionConfig) -> Dict[str, Any]:
        return {}

    def update_adjudication(self, adjudication: Dict[str, Any], cfg: SessionConfig, **values) -> Dict[str, Any]:
        raise ValidationError(f"{self.drill_type} ends are not adjudicated")

    def validate_end(self, marks, adjudication: Dict[str, Any], cfg: SessionConfig):
        pass

    def evaluate_end(self, end_number: int, marks, adjudication: Dict[str, Any],
                     previous: Optional[EndRecord], cfg: SessionConfig) -> EndRecord:
        raise NotImplementedError

    def compute_statistics(self, ends: Tuple[EndRecord, ...], cfg: SessionConfig) -> Dict[str, Any]:
        raise NotImplementedError

    def summary_columns(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    # shared setup checks

    def _check_metadata(self, cfg: SessionConfig):
        bad = [w for w in cfg.weather if w not in config.WEATHER_OPTIONS]
        if bad:
            raise ValidationError(f"unknown weather: {', '.join(bad)}")
        if cfg.surface and cfg.surface not in config.SURFACE_OPTIONS:
            raise ValidationError(f"unknown surface {cfg.surface!r}")

    def _check_no_scoring_rule(self, cfg: SessionConfig):
        if cfg.scoring_rule is not None:
            raise ValidationError(f"{self.drill_type} has no scoring rule option")

    def _check_head_to_head(self, cfg: SessionConfig, bowls_options: Tuple[int, ...]):
        if not cfg.player_a_name.strip() or not cfg.player_b_name.strip() or not cfg.session_date:
            raise ValidationError("Please fill in all required fields")
        # winner is reported by name
        name_a, name_b = cfg.player_a_name.strip().casefold(), cfg.player_b_name.strip().casefold()
        if DRAW.casefold() in (name_a, name_b):
            raise ValidationError(f"{DRAW!r} cannot be used as a player name")
        if name_a == name_b:
            raise ValidationError("Players must have different names")
        if not config.MIN_ENDS <= cfg.num_ends <= config.MAX_ENDS:
            raise ValidationError(f"number of ends must be between {config.MIN_ENDS} and {config.MAX_ENDS}")
        if cfg.bowls_per_player not in bowls_options:
            raise ValidationError(
                f"bowls per player must be one of {', '.join(str(b) for b in bowls_options)}")
        self._check_metadata(cfg)


def get_drill(drill_type: str) -> DrillRules:
    # variant modules import DrillRules from here
    if drill_type == FORTY_BOWLS_DRAW:
        from forty_bowls import FortyBowlsDraw
        return FortyBowlsDraw()
    if drill_type == LEAD_VS_LEAD:
        from lead_vs_lead import LeadVsLead
        return LeadVsLead()
    if drill_type == SECONDS_CHANCE:
        from seconds_chance import SecondsChance
        return SecondsChance()
    raise ValidationError(f"unknown drill type {drill_type!r}")
