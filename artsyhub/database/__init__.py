"""Persistence layer (Flask-SQLAlchemy models)."""

from .db_manager import Favorite, User, db, initialize_database

__all__ = ["Favorite", "User", "db", "initialize_database"]
