"""Database package: engine, session, base."""

from app.db.session import async_session_maker, get_db, store_call, unit_of_work

__all__ = ["async_session_maker", "get_db", "store_call", "unit_of_work"]
