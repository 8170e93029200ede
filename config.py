import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as kartslot.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "kartslot.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Business
    BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Monaco Kart")
    BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo")

    # Pricing (per person, currency units)
    PRICE_PER_PERSON = os.getenv("PRICE_PER_PERSON", "110.00")
    DISCOUNT_RATE = os.getenv("DISCOUNT_RATE", "0.10")

    # Participant limits per session type
    MIN_PARTICIPANTS = 1
    MAX_PARTICIPANTS = 15
    PRIVATE_MIN_PARTICIPANTS = 15
    PRIVATE_MAX_PARTICIPANTS = 50

    # Schedule generation
    OPENING_TIME = os.getenv("OPENING_TIME", "10:00")
    CLOSING_TIME = os.getenv("CLOSING_TIME", "22:00")
    SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "25"))
    SLOT_INTERVAL_MINUTES = int(os.getenv("SLOT_INTERVAL_MINUTES", "30"))
    SLOT_MAX_CAPACITY = int(os.getenv("SLOT_MAX_CAPACITY", "15"))

    # Conditional slot updates: how many fresh reads before giving up
    SLOT_UPDATE_ATTEMPTS = int(os.getenv("SLOT_UPDATE_ATTEMPTS", "3"))

    # Admin endpoints are disabled while this is unset
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    ADMIN_API_KEY = "test-admin-key"
    LOG_LEVEL = "DEBUG"
