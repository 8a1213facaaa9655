"""Test environment: settings are read at import time, so point them at SQLite before anything imports spendlog."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("PUBLIC_BASE_URL", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")
