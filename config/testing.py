from .config import Config

SECRET_KEY = "test-secret"

DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
TIMEZONE = None

SITE_POLICIES = {
    "HQ": {"latitude": 23.8103, "longitude": 90.4125, "radius_meters": 200, "late_cutoff": "09:15"},
}
DEFAULT_SITE = "HQ"
APPROVE_COMPLIANT_CHECKINS = False

AUTO_INIT_DB = False
AUTO_SEED_DB = False
