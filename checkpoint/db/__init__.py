"""Database package."""
from checkpoint.db.session import engine, SessionLocal, get_db
from checkpoint.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "Base"]
