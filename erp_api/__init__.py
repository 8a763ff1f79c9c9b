from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate

import logging

db = SQLAlchemy()
bcrypt = Bcrypt()
jwt = JWTManager()
migrate = Migrate()


def create_app(config_object=None):
    app = Flask(__name__)
    CORS(app)

    if config_object is None:
        from config import get_config_object
        config_object = get_config_object()
    app.config.from_object(config_object)

    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    from .exceptions import register_error_handlers
    register_error_handlers(app)

    with app.app_context():
        from .routes import main
        from .routes.common_routes import common_bp
        from .auth import auth
        from . import models
        app.register_blueprint(main, url_prefix='/api')
        app.register_blueprint(auth, url_prefix='/api/auth')
        app.register_blueprint(common_bp)
        db.create_all()

    return app
