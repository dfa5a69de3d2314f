#!/usr/bin/env python3
"""Sync ReliefWeb, Adzuna and RSS job feeds into Firestore. Reads scripts/.env first."""
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

from job_feeds.runner import cli  # noqa: E402

if __name__ == "__main__":
    cli()
