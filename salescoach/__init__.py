import os

from flask import Flask, flash, redirect, url_for
from flask_migrate import Migrate
from werkzeug.exceptions import RequestEntityTooLarge

from .extensions import db, csrf, records

migrate = Migrate()


def create_app(test_config=None):
    """App factory. ``test_config`` overrides values from ``config.Config``."""
    app = Flask(__name__)
    app.config.from_object('config.Config')
    if test_config:
        app.config.update(test_config)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    records.init_app(app)

    # the sql store needs its table; alembic sets SKIP_CREATE_ALL when it runs
    if app.config.get('STORE_BACKEND', 'sql') == 'sql' and not os.getenv('SKIP_CREATE_ALL'):
        from . import models  # noqa: F401
        with app.app_context():
            db.create_all()

    from .blueprints.main import bp as main_bp
    from .blueprints.analysis import bp as analysis_bp
    from .api import bp as api_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(analysis_bp, url_prefix="/analysis")
    app.register_blueprint(api_bp, url_prefix="/api")
    # the JSON API is called by scripts, not by forms
    csrf.exempt(api_bp)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        flash("That file is too large to upload.", "error")
        return redirect(url_for('main.index'))

    return app
