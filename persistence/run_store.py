"""SQLite/PostgreSQL run history CRUD operations."""

import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine, desc
from sqlalchemy.orm import sessionmaker

from persistence.models import Base, Run

logger = logging.getLogger(__name__)

_engine = None
_Session = None
_DEFAULT_URL = "sqlite:///runs.db"


def init_db(url: str = _DEFAULT_URL) -> None:
    """Create tables if they don't exist and initialize the session factory."""
    global _engine, _Session
    _engine = create_engine(url, echo=False)
    Base.metadata.create_all(_engine)
    _Session = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(f"[run_store] Database initialized ({url.split('@')[-1] if '@' in url else url})")


def _session():
    """Return a new database session, initializing if needed."""
    if _Session is None:
        init_db()
    return _Session()


def create_run(run_id: str, mode: str, target_url: str | None = None) -> Run:
    """Insert a new run record in ``running`` state. Returns the Run."""
    run = Run(id=run_id, mode=mode, target_url=target_url, status="running")
    session = _session()
    try:
        session.add(run)
        session.commit()
        return run
    finally:
        session.close()


def update_run(run_id: str, state: dict, error: str = "") -> None:
    """Record the final counts, usage and status of a run."""
    session = _session()
    try:
        run = session.query(Run).filter_by(id=run_id).first()
        if not run:
            return

        artifacts = state.get("artifacts", [])
        run.status = "failed" if error else "completed"
        run.completed_at = datetime.now(timezone.utc)
        run.pages = len(state.get("snapshots", []))
        run.components = len(state.get("components", []))
        run.artifacts = len(artifacts)
        run.defects = sum(1 for a in artifacts if a.verdict == "accepted_with_defects")
        run.placeholders = sum(1 for a in artifacts if a.verdict == "placeholder")
        run.total_tokens = state.get("total_tokens", 0)
        run.cost_usd = state.get("cost_usd", 0.0)
        run.error = error or None

        session.commit()
    finally:
        session.close()


def get_run(run_id: str) -> Run | None:
    """Fetch a single run by ID."""
    session = _session()
    try:
        return session.query(Run).filter_by(id=run_id).first()
    finally:
        session.close()


def list_runs(limit: int = 20) -> list[Run]:
    """List recent runs, newest first."""
    session = _session()
    try:
        return session.query(Run).order_by(desc(Run.created_at)).limit(limit).all()
    finally:
        session.close()
