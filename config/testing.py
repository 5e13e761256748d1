import os
import tempfile

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

KIOSK_ID = "kiosk-test"
LOG_LEVEL = "DEBUG"
LOG_DIR = ""

STORAGE_BACKEND = "json"
DATA_DIR = os.getenv("DATA_DIR", os.path.join(tempfile.gettempdir(), "faceguard-test"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "faceguard_test"),
}

AUTO_INIT_DB = False

GEMINI_API_KEY = ""
GEMINI_MODEL = "gemini-3-flash-preview"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
ORACLE_TIMEOUT_SECONDS = 2.0

DISPLAY_INTERVAL_SECONDS = 5.0
ORG_TIMEZONE = "UTC"

ADMIN_TOKEN = "test-admin-token"
