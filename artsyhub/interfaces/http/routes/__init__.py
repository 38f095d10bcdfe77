"""Route blueprints exposed via Flask."""

from .artist import artist_bp
from .auth import auth_bp
from .favorites import favorite_bp
from .health import health_bp

__all__ = [
    "artist_bp",
    "auth_bp",
    "favorite_bp",
    "health_bp",
]
