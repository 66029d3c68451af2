import os
import logging
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Flask specific imports ---
from flask import Flask, request, g
from flask_cors import CORS

# --- Import our configuration and the mixtape service ---
from config import Config
from mixtape.database.db_manager import initialize_database
from mixtape.auth import init_auth
from mixtape.domain.mixtapes import (
    DefaultPlaylistRecordRepository,
    MixtapeService,
    SpotifyApiClient,
)
from mixtape.interfaces.http.routes import spotify_bp, health_bp
from mixtape.observability import configure_structured_logging, metrics_blueprint
from mixtape.settings import load_spotify_api_settings


logger = logging.getLogger(__name__)

# app.config key -> SpotifyApiSettings field
_SETTINGS_FROM_CONFIG = {
    'SPOTIFY_API_BASE_URL': 'api_base_url',
    'SPOTIFY_WEB_BASE_URL': 'web_base_url',
    'SPOTIFY_REQUEST_TIMEOUT_SECONDS': 'request_timeout_seconds',
    'SPOTIFY_MAX_ITEMS_PER_REQUEST': 'max_items_per_request',
    'SPOTIFY_RATE_LIMIT_RETRIES': 'rate_limit_retries',
    'SPOTIFY_RETRY_AFTER_CAP_SECONDS': 'retry_after_cap_seconds',
    'PLAYLIST_FETCH_WORKERS': 'playlist_fetch_workers',
    'DEFAULT_PLAYLIST_PAGE_SIZE': 'default_playlist_page_size',
}


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is set
      - Werkzeug/Flask loggers routed to root

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
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

    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def create_app(config_overrides=None, spotify_http=None):
    """Build the Flask app.

    ``spotify_http`` replaces the ``requests`` module as the transport used for
    Spotify Web API calls.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    configure_structured_logging(app)

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
        for origin in app.config.get('CORS_ALLOWED_ORIGINS') or []
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(app, resources={r"/api/*": {"origins": allowed_origins}}, supports_credentials=True)

    # Initialize database and login
    initialize_database(app)
    init_auth(app)

    settings = load_spotify_api_settings(
        {field: app.config[key] for key, field in _SETTINGS_FROM_CONFIG.items() if key in app.config}
    )
    api_client = SpotifyApiClient(settings, http=spotify_http)
    app.extensions['mixtape_service'] = MixtapeService(
        api_client,
        repository=DefaultPlaylistRecordRepository(),
        settings=settings,
    )
    app.logger.info(
        "Mixtape service ready: api=%s, batch=%s, workers=%s",
        settings.api_base_url,
        settings.max_items_per_request,
        settings.playlist_fetch_workers,
    )

    # --- Register Blueprints ---
    app.register_blueprint(spotify_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_blueprint)

    return app


if __name__ == '__main__':
    # In debug with reloader only the child process configures file logging
    debug_mode = bool(Config.DEBUG)
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'mixtape', 'log')
    if not debug_mode or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    if not Config.SPOTIPY_CLIENT_ID or not Config.SPOTIPY_CLIENT_SECRET:
        logger.warning("Spotify API client ID or client secret not found in environment variables.")
        logger.warning("Please set SPOTIPY_CLIENT_ID and SPOTIPY_CLIENT_SECRET to enable login.")

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application...")
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=5000, threaded=True)
