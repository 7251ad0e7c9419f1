# backend/session_manager.py
from typing import Optional, Dict, Any, List, Tuple
from drills import get_drill
from errors import TransitionError
from state import DrillSession, SessionConfig, EndRecord, SUMMARY
import database


async def load_records(session_id: int) -> Optional[Tuple[SessionConfig, List[EndRecord]]]:
    """
    Load a stored session as (config, ends), or None if it does not exist.

    This is the only way the drill code reads persisted sessions.
    """
    row = await database.get_session(session_id)
    if row is None:
        return None
    cfg = SessionConfig.from_dict({**row["config"], "drill_type": row["drill_type"]})
    rules = get_drill(cfg.drill_type)
    ends = [EndRecord.from_dict(e, rules.mark_type) for e in row["ends_data"]]
    return cfg, ends


class SessionManager:
    """
    Manages the lifecycle of drill sessions.

    Responsibilities:
    - Hold the active DrillSession
    - Save sessions that reached summary
    - Reload stored sessions for review
    """

    def __init__(self):
        self.session: Optional[DrillSession] = None
        self.saved_session_id: Optional[int] = None

    def has_active_session(self) -> bool:
        """Check if there's an active session"""
        return self.session is not None

    def require_session(self) -> DrillSession:
        if self.session is None:
            raise TransitionError("No active session")
        return self.session

    def start_session(self, drill_type: str, **setup) -> DrillSession:
        """
        Configure and start a new drill.

        Args:
            drill_type: one of the drill type strings in drills.DRILL_TYPES
            setup: SessionConfig fields (names, date, ends, bowls, ...)

        Returns:
            The new session, already in the playing state.
        """
        session = DrillSession(get_drill(drill_type))
        session.configure(**setup)
        session.start()

        self.session = session
        self.saved_session_id = None
        print(f"[SESSION] Started {drill_type}: {session.config.num_ends} ends × "
              f"{session.config.bowls_per_player} bowls")
        return session

    def open_setup(self, drill_type: str) -> DrillSession:
        """Open a new drill in the setup state with its default config"""
        self.session = DrillSession(get_drill(drill_type))
        self.saved_session_id = None
        print(f"[SESSION] Setup {drill_type}")
        return self.session

    def begin(self) -> DrillSession:
        """Start the session currently in setup"""
        session = self.require_session()
        session.start()
        print(f"[SESSION] Started {session.config.drill_type}: {session.config.num_ends} ends × "
              f"{session.config.bowls_per_player} bowls")
        return session

    def reset(self):
        """Send the active drill back to setup (reset button); the drill type is kept"""
        session = self.require_session()
        session.reset()
        self.saved_session_id = None
        print(f"[SESSION] Reset {session.config.drill_type} session to setup")

    def end_session(self):
        """Drop the active session entirely (new session / drill selection)"""
        if self.session is not None:
            print(f"[SESSION] Closed {self.session.config.drill_type} session")
        self.session = None
        self.saved_session_id = None

    async def save(self) -> int:
        """
        Persist the active session once it reached summary.

        Returns:
            session_id: Database ID of the stored session
        """
        session = self.require_session()
        if session.state != SUMMARY:
            raise TransitionError("Session can only be saved from summary")

        stats = session.statistics()
        session_id = await database.save_session(
            drill_type=session.config.drill_type,
            config_data=session.config.to_dict(),
            ends_data=[e.to_dict() for e in session.ends],
            stats_data=stats,
            summary=session.rules.summary_columns(stats),
        )
        self.saved_session_id = session_id
        print(f"[SESSION] Saved session {session_id}: {len(session.ends)} ends")
        return session_id

    async def load(self, session_id: int) -> Optional[DrillSession]:
        """Make a stored session the active one, in summary state"""
        records = await load_records(session_id)
        if records is None:
            return None
        cfg, ends = records

        session = DrillSession(get_drill(cfg.drill_type))
        session.load(cfg, ends)
        self.session = session
        self.saved_session_id = session_id
        print(f"[SESSION] Loaded session {session_id}: {cfg.drill_type}, {len(ends)} ends")
        return session

    def get_session_info(self) -> Optional[Dict[str, Any]]:
        """Get current session information"""
        if not self.has_active_session():
            return None
        return {
            "saved_session_id": self.saved_session_id,
            **self.session.to_payload(),
        }
