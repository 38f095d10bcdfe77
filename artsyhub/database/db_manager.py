# artsyhub/database/db_manager.py
import os
import logging
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import ForeignKey, UniqueConstraint, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import relationship
from werkzeug.security import check_password_hash, generate_password_hash

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    module = type(dbapi_connection).__module__
    if module.startswith("sqlite3") or module.startswith("pysqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    fullname = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    profile_image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    favorites = relationship(
        "Favorite",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "fullname": self.fullname,
            "email": self.email,
            "profileImageUrl": self.profile_image_url,
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class Favorite(db.Model):
    __tablename__ = 'favorites'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    artist_id = db.Column(db.String(128), nullable=False)
    artist_name = db.Column(db.String(255), nullable=False)
    artist_image = db.Column(db.String(500), nullable=True)
    nationality = db.Column(db.String(128), nullable=True)
    birthday = db.Column(db.String(64), nullable=True)
    deathday = db.Column(db.String(64), nullable=True)
    added_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    owner = relationship('User', back_populates='favorites')

    __table_args__ = (
        UniqueConstraint('user_id', 'artist_id', name='uq_favorites_user_artist'),
    )

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'userId': str(self.user_id),
            'artistId': self.artist_id,
            'artistName': self.artist_name,
            'artistImage': self.artist_image,
            'nationality': self.nationality,
            'birthday': self.birthday,
            'deathday': self.deathday,
            'addedAt': self.added_at.isoformat() + 'Z' if self.added_at else None,
        }

    def __repr__(self) -> str:
        return f'<Favorite {self.artist_id} of user {self.user_id}>'


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
