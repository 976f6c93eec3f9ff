import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
TIMEZONE = Config.TIMEZONE

SITE_POLICIES = Config.SITE_POLICIES
DEFAULT_SITE = Config.DEFAULT_SITE
APPROVE_COMPLIANT_CHECKINS = Config.APPROVE_COMPLIANT_CHECKINS

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
