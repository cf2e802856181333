SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"
MONGODB_URI = "mongodb://127.0.0.1:27017/student-management-test"
MONGODB_DB = "student-management-test"

MAIL_SERVER = ""

APP_BASE_URL = "http://testserver"

OTP_TTL_MINUTES = 10
OTP_MAX_ATTEMPTS = 5
RESET_TOKEN_TTL_MINUTES = 60

LOG_LEVEL = "DEBUG"
LOG_FILE = None

DEBUG = False
TESTING = True
