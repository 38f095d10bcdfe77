import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, request, g
from flask_cors import CORS

from config import Config
from artsyhub.auth import init_auth
from artsyhub.database.db_manager import initialize_database
from artsyhub.domain.catalog import (
    ArtsyClient,
    ArtsyTokenCache,
    JsonFileTokenStore,
    XappTokenFetcher,
)
from artsyhub.domain.favorites import FavoriteStore
from artsyhub.domain.identity import IdentityService, SessionTokens
from artsyhub.errors import UpstreamError, register_error_handlers
from artsyhub.interfaces.http.routes import (
    artist_bp,
    auth_bp,
    favorite_bp,
    health_bp,
)
from artsyhub.observability import configure_structured_logging, metrics_blueprint, init_tracing
from artsyhub.settings import load_app_settings
from artsyhub.utils.cache import TTLCache


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Keep the structured stdout handler; drop earlier file handlers
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # Route werkzeug's request log through root instead of its own handler
    werkzeug_logger = logging.getLogger("werkzeug")
    werkzeug_logger.handlers = []
    werkzeug_logger.propagate = True

    return log_path


def build_services(app):
    """Construct the catalog, favorites and identity services for ``app``."""
    settings = load_app_settings(app.config)
    app.extensions['app_settings'] = settings

    token_cache = app.extensions.get('artsy_token_cache')
    if token_cache is None:
        fetcher = XappTokenFetcher(
            client_id=settings.artsy_client_id,
            client_secret=settings.artsy_client_secret,
            base_url=settings.artsy_api_base,
            timeout=settings.artsy_timeout_seconds,
        )
        token_cache = ArtsyTokenCache(fetcher, JsonFileTokenStore(settings.artsy_token_file))
        app.extensions['artsy_token_cache'] = token_cache

    artsy_client = app.extensions.get('artsy_client')
    if artsy_client is None:
        artsy_client = ArtsyClient(
            token_provider=token_cache.get_token,
            base_url=settings.artsy_api_base,
            timeout=settings.artsy_timeout_seconds,
            cache=TTLCache(
                maxsize=settings.metadata_cache_maxsize,
                ttl=settings.metadata_cache_ttl_seconds,
            ),
        )
        app.extensions['artsy_client'] = artsy_client

    favorite_store = FavoriteStore(artist_lookup=artsy_client.lookup_artist)
    app.extensions['favorite_store'] = favorite_store
    app.extensions['identity_service'] = IdentityService(
        tokens=SessionTokens(settings.jwt_secret, settings.jwt_algorithm),
        favorites=favorite_store,
        register_ttl_seconds=settings.jwt_register_ttl_seconds,
        login_ttl_seconds=settings.jwt_login_ttl_seconds,
    )

    if not settings.artsy_credentials_configured:
        logger.warning("Artsy client ID or client secret not found in environment variables.")
        logger.warning("Please set ARTSY_CLIENT_ID and ARTSY_CLIENT_SECRET for catalog lookups.")
    elif app.config.get('PREFETCH_ARTSY_TOKEN', True):
        try:
            token_cache.get_token()
            logger.info("Initial Artsy token ready.")
        except UpstreamError as e:
            # The first catalog request retries the fetch
            logger.warning("Failed to prefetch Artsy token at startup: %s", e)


def create_app(config_overrides=None):
    """Application factory.

    ``config_overrides`` is applied on top of ``config.Config``. Prebuilt
    ``artsy_token_cache`` / ``artsy_client`` objects may be passed under
    ``EXTENSIONS`` to replace the live Artsy wiring.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    overrides = dict(config_overrides or {})
    prebuilt_extensions = overrides.pop('EXTENSIONS', None) or {}
    app.config.update(overrides)

    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        supports_credentials=True,
    )

    register_error_handlers(app)

    initialize_database(app)
    app.extensions.update(prebuilt_extensions)
    build_services(app)
    init_auth(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(artist_bp)
    app.register_blueprint(favorite_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'artsyhub', 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    app.run(host='0.0.0.0', port=Config.PORT, debug=debug_mode, threaded=True)
