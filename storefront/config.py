import os
from datetime import timedelta
from decimal import Decimal


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # response envelope timestamps are rendered in WIB (UTC+7)
    API_TZ_OFFSET_HOURS = int(os.getenv("API_TZ_OFFSET_HOURS", "7"))

    # pricing
    TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.11"))
    DEFAULT_CARRIER = "jne"
    DEFAULT_SHIPPING_RATES = {
        "jne": Decimal("15000"),
        "tiki": Decimal("16000"),
        "pos": Decimal("14000"),
        "sicepat": Decimal("13000"),
    }
    DEFAULT_MINIMUM_SHIPPING_COST = Decimal("9000")
    DELIVERY_DAYS = {"jne": 2, "tiki": 2, "pos": 3, "sicepat": 1}
    DEFAULT_DELIVERY_DAYS = 2

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    AUTO_CREATE_TABLES = False
    LOG_LEVEL = "DEBUG"

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
