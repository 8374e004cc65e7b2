import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "inventory_test_db"),
}

DEBUG = False
TESTING = True

STORAGE_BACKEND = "memory"

AUTO_INIT_DB = False
AUTO_SEED_DB = True

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
