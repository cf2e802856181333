import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# auto: try MongoDB, fall back to in-memory storage when it is not reachable
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "auto")
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://127.0.0.1:27017/student-management")
MONGODB_DB = os.getenv("MONGODB_DB", "student-management")
MONGODB_TIMEOUT_MS = int(os.getenv("MONGODB_TIMEOUT_MS", "2000"))

# Leave MAIL_SERVER empty to log emails instead of sending them
MAIL_SERVER = os.getenv("MAIL_SERVER", "")
MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
MAIL_USE_TLS = bool(int(os.getenv("MAIL_USE_TLS", "1")))
MAIL_USE_SSL = bool(int(os.getenv("MAIL_USE_SSL", "0")))
MAIL_USERNAME = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", MAIL_USERNAME)
MAIL_TIMEOUT_SECONDS = float(os.getenv("MAIL_TIMEOUT_SECONDS", "10"))

APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "10"))
OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))
RESET_TOKEN_TTL_MINUTES = int(os.getenv("RESET_TOKEN_TTL_MINUTES", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE")

DEBUG = True
