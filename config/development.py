import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_portal"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Honour X-Forwarded-For when the app sits behind a reverse proxy.
TRUST_PROXY_HEADERS = bool(int(os.getenv("TRUST_PROXY_HEADERS", "0")))

# Idle sign-in sessions (and their attendance cycles) are closed after this many minutes.
SESSION_IDLE_MINUTES = int(os.getenv("SESSION_IDLE_MINUTES", "720"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load reference data (leave types, departments, target types)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

# First admin account, created on startup when no admin exists yet.
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
