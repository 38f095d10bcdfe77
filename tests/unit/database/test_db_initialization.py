from flask import Flask
from sqlalchemy import text


def test_initialize_database_creates_sqlite_directory(tmp_path):
    # Arrange a non-existent subdirectory for the DB file
    target_dir = tmp_path / "nested" / "dbdir"
    db_file = target_dir / "test.db"
    uri = f"sqlite:///{db_file}".replace("\\", "/")

    from artsyhub.database.db_manager import Favorite, User, db, initialize_database

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Act: initialize should create missing directory and tables
    initialize_database(app)

    assert target_dir.exists()
    with app.app_context():
        assert db.session.query(User).count() == 0
        assert db.session.query(Favorite).count() == 0
        # Cascading deletes rely on SQLite enforcing foreign keys per connection
        assert db.session.execute(text("PRAGMA foreign_keys")).scalar() == 1
