from __future__ import annotations

import os
from typing import List


def _env_list(name: str, default: str = "") -> List[str]:
    return [entry.strip().lower() for entry in os.getenv(name, default).split(",") if entry.strip()]


LOG_LEVEL = os.getenv("JOB_FEEDS_LOG_LEVEL", "INFO").upper()

USER_AGENT = os.getenv("JOB_FEEDS_USER_AGENT", "Jobna/1.0")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("JOB_FEEDS_TIMEOUT", "15"))
FEED_MAX_BYTES = int(os.getenv("JOB_FEEDS_FEED_MAX_KB", "1024")) * 1024

# Keep only the most recent N jobs in the collection
MAX_JOBS_IN_DB = int(os.getenv("JOB_FEEDS_MAX_JOBS_IN_DB", "2000"))

ENABLED_SOURCES = _env_list("JOB_FEEDS_ENABLED_SOURCES")
DISABLED_SOURCES = _env_list("JOB_FEEDS_DISABLED_SOURCES")

RELIEFWEB_APPNAME = os.getenv("RELIEFWEB_APPNAME", "jobna")
RELIEFWEB_URL = os.getenv(
    "RELIEFWEB_URL",
    f"https://api.reliefweb.int/v1/jobs?appname={RELIEFWEB_APPNAME}&limit=100",
)
RELIEFWEB_MAX_JOBS = int(os.getenv("RELIEFWEB_MAX_JOBS", "100"))

ADZUNA_APP_ID = os.getenv("ADZUNA_APP_ID", "") or os.getenv("JOB_FEEDS_ADZUNA_APP_ID", "")
ADZUNA_APP_KEY = os.getenv("ADZUNA_APP_KEY", "") or os.getenv("JOB_FEEDS_ADZUNA_APP_KEY", "")
ADZUNA_BASE_URL = os.getenv("ADZUNA_BASE_URL", "https://api.adzuna.com/v1/api/jobs")
ADZUNA_COUNTRY_LIST = _env_list("ADZUNA_COUNTRY_LIST")
ADZUNA_COUNTRY = os.getenv("ADZUNA_COUNTRY", "").strip().lower()
ADZUNA_WHAT = os.getenv("ADZUNA_WHAT", "").strip()
ADZUNA_PAGES = max(1, int(os.getenv("ADZUNA_PAGES", "1")))
ADZUNA_MAX_JOBS = int(os.getenv("ADZUNA_MAX_JOBS", "50"))

FEED_MAX_JOBS = int(os.getenv("JOB_FEEDS_RSS_MAX_JOBS", "50"))

FIREBASE_SERVICE_ACCOUNT_JSON = os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON", "") or os.getenv(
    "FIREBASE_SERVICE_ACCOUNT_KEY", ""
)
FIREBASE_SERVICE_ACCOUNT_B64 = os.getenv("FIREBASE_SERVICE_ACCOUNT_B64", "")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_COLLECTION = os.getenv("FIREBASE_COLLECTION", "jobs")
