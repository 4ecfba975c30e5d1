import logging
from flask import Flask, jsonify
from .extensions import db, jwt, cors, migrate
from .config import Config


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    config_class.init_app(app)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    migrate.init_app(app, db)

    # Models must be imported before create_all / migrations see the metadata
    from . import model  # noqa: F401

    # Register blueprints
    from .pricing import bp as pricing_bp; app.register_blueprint(pricing_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    app.logger.debug("blueprints registered: %s", sorted(app.blueprints.keys()))
    return app
