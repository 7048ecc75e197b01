"""Database package."""

from evidence_engine.db.session import Base, SessionLocal, atomic, engine, get_db

__all__ = ["Base", "SessionLocal", "atomic", "engine", "get_db"]
