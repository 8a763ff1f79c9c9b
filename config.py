import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///erp.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-jwt-secret-key')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_HOURS', '24')))

    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', 'uploads')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    LOGO_MAX_BYTES = 5 * 1024 * 1024
    LOGO_EXTENSIONS = {'jpeg', 'jpg', 'png', 'gif', 'svg'}

    # Calendar-day boundaries for attendance
    BUSINESS_TIMEZONE = os.getenv('BUSINESS_TIMEZONE', 'UTC')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET_KEY = 'testing-jwt-secret-key-with-enough-length'
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    DEBUG = False


_CONFIG_BY_ENV = {
    'development': 'config.DevelopmentConfig',
    'testing': 'config.TestingConfig',
    'production': 'config.ProductionConfig',
}


def get_config_object():
    """Dotted path of the config class selected by APP_ENV."""
    env = os.getenv('APP_ENV', 'development').lower()
    return _CONFIG_BY_ENV.get(env, 'config.Config')
