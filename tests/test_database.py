import asyncio

import pytest

import database
from session_manager import SessionManager, load_records
from errors import TransitionError


def _play_lead(manager: SessionManager, setup) -> None:
    session = manager.start_session("lead-vs-lead", **setup)
    for winner in ("A", "B", "A"):
        session.toggle_bowl_attribute(session.current_end, winner, 0, "good")
        session.complete_end()
        session.set_adjudication(shot_winner=winner, shots_won=1)
        session.finalize_end()


def test_save_requires_summary(temp_db, lead_setup) -> None:
    async def scenario():
        await database.init_db()
        manager = SessionManager()
        manager.start_session("lead-vs-lead", **lead_setup)
        await manager.save()

    with pytest.raises(TransitionError):
        asyncio.run(scenario())


def test_save_and_reload_reproduces_statistics(temp_db, lead_setup) -> None:
    async def scenario():
        await database.init_db()
        manager = SessionManager()
        _play_lead(manager, lead_setup)
        live = manager.session.statistics()
        session_id = await manager.save()

        row = await database.get_session(session_id)
        reloaded = await SessionManager().load(session_id)
        return live, row, reloaded

    live, row, reloaded = asyncio.run(scenario())
    assert row["drill_type"] == "lead-vs-lead"
    assert row["player_a_final_score"] == 6
    assert row["player_b_final_score"] == 3
    assert row["winner"] == "Alice"
    assert row["player_a_total"] == 2
    assert row["ends_played"] == 3
    assert row["stats"] == live
    assert reloaded.state == "summary"
    assert reloaded.statistics() == live


def test_load_records_returns_config_and_ends(temp_db, lead_setup) -> None:
    async def scenario():
        await database.init_db()
        manager = SessionManager()
        _play_lead(manager, lead_setup)
        session_id = await manager.save()
        return manager.session, await load_records(session_id), await load_records(session_id + 1)

    session, (cfg, ends), missing = asyncio.run(scenario())
    assert cfg == session.config
    assert ends == session.ends
    assert missing is None


def test_list_filter_and_delete(temp_db, lead_setup) -> None:
    async def scenario():
        await database.init_db()
        manager = SessionManager()
        _play_lead(manager, lead_setup)
        lead_id = await manager.save()

        session = manager.start_session("40-bowls-draw", player_a_name="Pat")
        session.complete_early()
        draw_id = await manager.save()

        everything = await database.list_sessions()
        draws = await database.list_sessions(drill_type="40-bowls-draw")
        deleted = await database.delete_session(lead_id)
        deleted_again = await database.delete_session(lead_id)
        remaining = await database.list_sessions()
        return draw_id, everything, draws, deleted, deleted_again, remaining

    draw_id, everything, draws, deleted, deleted_again, remaining = asyncio.run(scenario())
    assert everything["total"] == 2
    assert [s["id"] for s in draws["sessions"]] == [draw_id]
    assert draws["sessions"][0]["success_percentage"] == 0
    assert draws["sessions"][0]["winner"] is None
    assert deleted is True
    assert deleted_again is False
    assert remaining["total"] == 1


def test_unknown_summary_column_rejected(temp_db) -> None:
    async def scenario():
        await database.init_db()
        await database.save_session(
            "lead-vs-lead",
            {"num_ends": 1, "bowls_per_player": 2},
            [],
            {},
            {"bogus": 1},
        )

    with pytest.raises(ValueError):
        asyncio.run(scenario())
