import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
TIMEZONE = Config.TIMEZONE

SITE_POLICIES = Config.SITE_POLICIES
DEFAULT_SITE = Config.DEFAULT_SITE
APPROVE_COMPLIANT_CHECKINS = Config.APPROVE_COMPLIANT_CHECKINS

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
