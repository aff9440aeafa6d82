"""Database module."""

from scam_trainer.db.database import close_database, get_db, init_database

__all__ = ["get_db", "init_database", "close_database"]
