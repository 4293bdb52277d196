import os
from flask import Flask, jsonify
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig, TestConfig, check_admin_password, check_production_secrets
from .extensions import db, migrate, limiter
from .common.errors import register_error_handlers
from .common.logging import setup_json_logging, register_request_logging
from .common.security import register_security_headers
from .store import init_store


def create_app(config_overrides=None):
    # Charge .env si présent (dev)
    load_dotenv()

    app = Flask(__name__)

    # Choix config selon env
    env = os.getenv("APP_ENV") or os.getenv("FLASK_ENV", "development")
    if env in ("test", "testing"):
        app.config.from_object(TestConfig)
    elif env == "production":
        app.config.from_object(ProdConfig)
    else:
        app.config.from_object(DevConfig)
    if config_overrides:
        app.config.update(config_overrides)

    check_admin_password(app.config)

    if env == "production":
        check_production_secrets(app.config)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)   # lit RATELIMIT_* depuis app.config

    setup_json_logging(app)
    register_request_logging(app)

    # Importer le modèle pour que Flask-Migrate/Alembic voie la table kv_entries
    from .store import sql_store  # noqa: F401

    store = init_store(app)

    register_error_handlers(app)
    register_security_headers(app, env)

    # --- Blueprints ---
    from .auth.routes import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix="/admin")

    from .notes.routes import admin_bp
    app.register_blueprint(admin_bp, url_prefix="/admin")

    # --- Probes ---
    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok", "env": env})

    @app.get("/readyz")
    def readyz():
        ok = store.ping()
        status = {
            "store": "up" if ok else "down",
            "backend": app.config.get("KV_BACKEND"),
            "status": "ok" if ok else "error",
        }
        return jsonify(status), (200 if ok else 503)

    from .notes.routes import bp as notes_bp
    app.register_blueprint(notes_bp)

    return app
