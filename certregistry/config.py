# config.py
# Manages application configuration for different environments using python-dotenv.

import os
from datetime import timedelta
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
PROJECT_ROOT = os.path.dirname(basedir)

load_dotenv(os.path.join(PROJECT_ROOT, '.env'))

class Config:
    """Base configuration class with settings common to all environments."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-hard-to-guess-default-secret-key'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'a-strong-jwt-secret-key-of-at-least-32-bytes'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=30)
    JWT_TOKEN_LOCATION = ["headers"]
    BASE_VERIFICATION_URL = os.environ.get('BASE_VERIFICATION_URL') or 'http://127.0.0.1:5000'
    SIGNUP_PIN = os.environ.get('SIGNUP_PIN') or 'change-me-in-production'

    # The single administrative owner. Compared by equality against the caller.
    ADMIN_ADDRESS = os.environ.get('ADMIN_ADDRESS') or '0xadmin'
    MAX_BATCH_SIZE = int(os.environ.get('MAX_BATCH_SIZE') or 50)

    @staticmethod
    def init_app(app):
        pass

class DevelopmentConfig(Config):
    """Configuration for the development environment."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///' + os.path.join(PROJECT_ROOT, 'instance', 'registry-dev.db')

class TestingConfig(Config):
    """Configuration for the testing environment."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite:///:memory:'
    ADMIN_ADDRESS = '0xadmin'
    SIGNUP_PIN = 'test-pin'
    BASE_VERIFICATION_URL = 'http://registry.test'

class ProductionConfig(Config):
    """Configuration for the production environment."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    ADMIN_ADDRESS = os.environ.get('ADMIN_ADDRESS')

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)
        if not cls.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL is not set for the production environment.")
        if not cls.ADMIN_ADDRESS:
            raise ValueError("ADMIN_ADDRESS is not set for the production environment.")

config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
