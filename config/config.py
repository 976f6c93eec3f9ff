"""Settings shared by every environment; each environment module overrides what it needs."""

import json
import os


def _bool(name: str, default: str = "0") -> bool:
    return bool(int(os.environ.get(name, default)))


def _site_policies() -> dict:
    # SITE_POLICIES_JSON='{"Dhaka HQ": {"latitude": 23.81, "longitude": 90.41, "radius_meters": 500, "late_cutoff": "09:15"}}'
    raw = os.environ.get("SITE_POLICIES_JSON")
    if raw:
        return json.loads(raw)
    return {
        "Dhaka HQ": {
            "latitude": 23.8103,
            "longitude": 90.4125,
            "radius_meters": float(os.environ.get("ALLOWED_RADIUS_METERS", "500")),
            "late_cutoff": os.environ.get("LATE_CUTOFF", "09:15"),
        },
    }


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "hr_workflow")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    TIMEZONE = os.environ.get("TIMEZONE", "Asia/Dhaka")

    SITE_POLICIES = _site_policies()
    DEFAULT_SITE = os.environ.get("DEFAULT_SITE", "Dhaka HQ")
    APPROVE_COMPLIANT_CHECKINS = _bool("APPROVE_COMPLIANT_CHECKINS")

    AUTO_INIT_DB = _bool("AUTO_INIT_DB")
    AUTO_SEED_DB = _bool("AUTO_SEED_DB")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
