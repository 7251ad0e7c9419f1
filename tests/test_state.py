import json

import pytest

from drills import get_drill
from errors import ValidationError, TransitionError
from marks import LeadMark
from state import DrillSession, EndRecord, SessionConfig, SETUP, PLAYING, END_COMPLETE, SUMMARY


@pytest.fixture
def session(lead_setup) -> DrillSession:
    s = DrillSession(get_drill("lead-vs-lead"))
    s.configure(**lead_setup)
    return s


def _play_end(s: DrillSession, winner: str = "A", shots: int = 1, toggles=()):
    for side, bowl, attribute in toggles:
        s.toggle_bowl_attribute(s.current_end, side, bowl, attribute)
    s.complete_end()
    s.set_adjudication(shot_winner=winner, shots_won=shots)
    return s.finalize_end()


def test_starts_in_setup(session: DrillSession) -> None:
    assert session.state == SETUP
    with pytest.raises(TransitionError):
        session.toggle_bowl_attribute(0, "A", 0, "good")
    with pytest.raises(TransitionError):
        session.finalize_end()


def test_start_requires_names(lead_setup) -> None:
    s = DrillSession(get_drill("lead-vs-lead"))
    s.configure(**{**lead_setup, "player_a_name": ""})
    with pytest.raises(ValidationError):
        s.start()
    assert s.state == SETUP


def test_configure_rejects_unknown_fields(session: DrillSession) -> None:
    with pytest.raises(ValidationError):
        session.configure(colour="green")


def test_config_frozen_once_playing(session: DrillSession) -> None:
    session.start()
    assert session.state == PLAYING
    with pytest.raises(TransitionError):
        session.configure(num_ends=5)


def test_start_initializes_marks(session: DrillSession) -> None:
    session.start()
    assert session.marks == {"A": (LeadMark(),) * 4, "B": (LeadMark(),) * 4}
    assert session.end_number == 1


def test_toggle_only_open_end(session: DrillSession) -> None:
    session.start()
    with pytest.raises(ValidationError):
        session.toggle_bowl_attribute(1, "A", 0, "good")
    with pytest.raises(ValidationError):
        session.toggle_bowl_attribute(0, "C", 0, "good")
    with pytest.raises(ValidationError):
        session.toggle_bowl_attribute(0, "A", 4, "good")


def test_back_to_edit_keeps_marks(session: DrillSession) -> None:
    session.start()
    session.toggle_bowl_attribute(0, "A", 0, "good")
    session.complete_end()
    assert session.state == END_COMPLETE
    assert session.adjudication == {"shot_winner": None, "shots_won": 1}

    session.back_to_edit()
    assert session.state == PLAYING
    assert session.ends == []
    assert session.marks["A"][0] == LeadMark(good=True)


def test_finalize_without_winner_stays_in_end_complete(session: DrillSession) -> None:
    session.start()
    session.complete_end()
    with pytest.raises(ValidationError):
        session.finalize_end()
    assert session.state == END_COMPLETE
    assert session.ends == []


def test_finalize_advances_and_resets_marks(session: DrillSession) -> None:
    session.start()
    record = _play_end(session, "A", 2, toggles=[("A", 0, "good"), ("B", 1, "crossed")])

    assert record.end_number == 1
    assert record.side("A").points == 6
    assert record.side("B").points == -1
    assert session.state == PLAYING
    assert session.end_number == 2
    assert session.marks["A"] == (LeadMark(),) * 4
    # finalized marks are untouched by the next end
    session.toggle_bowl_attribute(1, "A", 0, "crossed")
    assert session.ends[0].side("A").marks[0] == LeadMark(good=True)


def test_last_end_moves_to_summary(session: DrillSession) -> None:
    session.start()
    for _ in range(3):
        _play_end(session)
    assert session.state == SUMMARY
    assert [e.end_number for e in session.ends] == [1, 2, 3]
    assert session.statistics()["player_a"]["final_score"] == 9
    with pytest.raises(TransitionError):
        session.complete_end()


def test_cumulative_invariant(session: DrillSession) -> None:
    session.start()
    _play_end(session, "A", 3, toggles=[("A", 0, "crossed"), ("B", 2, "short")])
    _play_end(session, "B", 1, toggles=[("A", 1, "short"), ("A", 2, "short")])
    _play_end(session, "B", 4)

    for side in ("A", "B"):
        previous = 0
        for end in session.ends:
            assert end.side(side).cumulative == previous + end.side(side).points
            previous = end.side(side).cumulative


def test_complete_early(session: DrillSession) -> None:
    session.start()
    _play_end(session)
    session.toggle_bowl_attribute(1, "A", 0, "good")
    session.complete_early()

    assert session.state == SUMMARY
    assert len(session.ends) == 1
    assert session.marks == {}
    with pytest.raises(TransitionError):
        session.complete_early()


def test_reset_returns_to_setup(session: DrillSession) -> None:
    session.start()
    _play_end(session)
    session.complete_early()
    session.reset()
    assert session.state == SETUP
    assert session.ends == []
    assert session.config == get_drill("lead-vs-lead").default_config()
    assert session.config.scoring_rule == "adjudicated"
    assert session.to_payload()["current_end"] == 1


def test_summary_payload_matches_after_reload(session: DrillSession) -> None:
    session.start()
    _play_end(session)
    session.complete_early()
    live = session.to_payload()
    assert live["current_end"] is None

    reloaded = DrillSession(session.rules)
    reloaded.load(session.config, list(session.ends))
    assert reloaded.to_payload() == live


def test_statistics_idempotent_and_round_trip(session: DrillSession) -> None:
    session.start()
    _play_end(session, "A", 2, toggles=[("A", 0, "good"), ("B", 0, "crossed")])
    _play_end(session, "B", 3, toggles=[("A", 3, "short")])
    live = session.statistics()
    assert session.statistics() == live

    stored = json.loads(json.dumps([e.to_dict() for e in session.ends]))
    rules = get_drill("lead-vs-lead")
    ends = [EndRecord.from_dict(e, rules.mark_type) for e in stored]
    cfg = SessionConfig.from_dict(json.loads(json.dumps(session.config.to_dict())))

    reloaded = DrillSession(rules)
    reloaded.load(cfg, ends)
    assert reloaded.state == SUMMARY
    assert json.dumps(reloaded.statistics(), sort_keys=True) == json.dumps(live, sort_keys=True)


def test_load_rejects_gaps(session: DrillSession) -> None:
    session.start()
    _play_end(session)
    _play_end(session)
    with pytest.raises(ValidationError):
        DrillSession(get_drill("lead-vs-lead")).load(session.config, [session.ends[1]])


def test_count_rule_outcome_setter(lead_setup) -> None:
    s = DrillSession(get_drill("lead-vs-lead"))
    s.configure(**lead_setup, scoring_rule="count")
    s.start()
    for i, outcome in enumerate(["held", "held", "crossed", "crossed"]):
        s.set_bowl_outcome(0, "A", i, outcome)
    s.set_bowl_outcome(0, "B", 0, "held")
    s.complete_end()
    record = s.finalize_end()
    assert record.side("A").cumulative == 4
    assert record.side("B").cumulative == 0


def test_seconds_chance_rotates_marks_each_end(lead_setup) -> None:
    s = DrillSession(get_drill("seconds-chance"))
    s.configure(**lead_setup)
    s.start()
    assert [m.hand for m in s.marks["A"]] == ["forehand", "forehand", "backhand", "backhand"]
    s.toggle_bowl_attribute(0, "A", 0, "success")
    s.complete_end()
    with pytest.raises(ValidationError):
        s.set_adjudication(shot_winner="A")
    s.finalize_end()
    assert [m.hand for m in s.marks["A"]] == ["backhand", "backhand", "forehand", "forehand"]
    assert s.ends[0].context["player_a_started_forehand"] is True


def test_payload_is_json_serializable(session: DrillSession) -> None:
    session.start()
    _play_end(session, toggles=[("A", 0, "good")])
    payload = json.loads(json.dumps(session.to_payload()))
    assert payload["state"] == PLAYING
    assert payload["current_end"] == 2
    assert payload["config"]["weather"] == []
    assert len(payload["ends"]) == 1
    assert payload["stats"]["player_a"]["total_held"] == 1


def test_config_from_dict_accepts_joined_weather() -> None:
    cfg = SessionConfig.from_dict({"drill_type": "40-bowls-draw", "weather": "Sunny, Windy"})
    assert cfg.weather == ("Sunny", "Windy")
