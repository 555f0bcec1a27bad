# config.py
import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default="False"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///attendance.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Keep secrets out of source control; these defaults are for local runs only
    QR_SECRET = os.getenv("QR_SECRET", "university-attendance-qr-secret")
    JWT_SECRET = os.getenv("JWT_SECRET", "university-attendance-jwt-secret")
    JWT_EXPIRY_SECONDS = int(os.getenv("JWT_EXPIRY_SECONDS", "43200"))
    QR_TOKEN_TTL_MS = int(os.getenv("QR_TOKEN_TTL_MS", str(30 * 60 * 1000)))

    CAMPUS_LAT = float(os.getenv("CAMPUS_LAT", "22.3039"))
    CAMPUS_LNG = float(os.getenv("CAMPUS_LNG", "73.3620"))
    CAMPUS_RADIUS_METERS = float(os.getenv("CAMPUS_RADIUS_METERS", "2000"))

    OPERATION_TIMEOUT_SECONDS = float(os.getenv("OPERATION_TIMEOUT_SECONDS", "5"))
    SEED_SAMPLE_DATA = _env_bool("SEED_SAMPLE_DATA")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    QR_SECRET = "test-qr-secret"
    JWT_SECRET = "test-jwt-secret"
    SEED_SAMPLE_DATA = False
