from __future__ import annotations

import base64
import json
import logging
from typing import Dict, Iterable, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from . import config
from .models import JobRecord
from .records import collapse_duplicates
from .utils import now_iso

logger = logging.getLogger(__name__)


def _service_account_data() -> Optional[Dict[str, object]]:
    if config.FIREBASE_SERVICE_ACCOUNT_JSON:
        return json.loads(config.FIREBASE_SERVICE_ACCOUNT_JSON)
    if config.FIREBASE_SERVICE_ACCOUNT_B64:
        decoded = base64.b64decode(config.FIREBASE_SERVICE_ACCOUNT_B64).decode("utf-8")
        return json.loads(decoded)
    return None


def init_firestore_client() -> Optional["firestore.Client"]:
    """Create a Firestore client from the first usable credential source.

    Tries a service account (JSON or base64), then a bare project id, then
    application default credentials. Returns ``None`` when none work.
    """
    try:
        service_data = _service_account_data()
    except (ValueError, OSError) as exc:
        logger.error("Firebase service account could not be decoded: %s", exc)
        return None

    try:
        if not firebase_admin._apps:
            if service_data:
                firebase_admin.initialize_app(credentials.Certificate(service_data))
                logger.info("Firebase Admin initialized with service account")
            elif config.FIREBASE_PROJECT_ID:
                firebase_admin.initialize_app(options={"projectId": config.FIREBASE_PROJECT_ID})
                logger.info("Firebase Admin initialized with project ID")
            else:
                firebase_admin.initialize_app(credentials.ApplicationDefault())
                logger.info("Firebase Admin initialized with default credentials")
        return firestore.client()
    except Exception as exc:  # noqa: BLE001
        logger.error("Firestore initialization error: %s", exc)
        return None


def cleanup_old_jobs(client: "firestore.Client", max_jobs: Optional[int] = None) -> int:
    """Delete every job beyond the newest ``max_jobs`` by ``dateAdded``."""
    keep = config.MAX_JOBS_IN_DB if max_jobs is None else max_jobs
    try:
        query = (
            client.collection(config.FIREBASE_COLLECTION)
            .order_by("dateAdded", direction="DESCENDING")
            .offset(keep)
        )
        docs = list(query.stream())
        if not docs:
            logger.info("No old jobs to clean up")
            return 0
        batch = client.batch()
        for doc in docs:
            batch.delete(doc.reference)
        batch.commit()
    except Exception as exc:  # noqa: BLE001
        logger.error("Cleanup error: %s", exc)
        return 0

    logger.info("Cleaned up %d old jobs", len(docs))
    return len(docs)


def store_jobs(
    client: "firestore.Client",
    jobs: Iterable[JobRecord],
    max_jobs: Optional[int] = None,
) -> Dict[str, int]:
    """Upsert ``jobs`` in one batch, then trim the collection.

    Existing documents keep their ``dateAdded`` and get ``lastUpdated``.
    A failed commit reports every job as skipped.
    """
    records = collapse_duplicates(jobs)
    collection = client.collection(config.FIREBASE_COLLECTION)
    batch = client.batch()
    stored = updated = skipped = 0

    for job in records:
        doc_ref = collection.document(job.id)
        try:
            snapshot = doc_ref.get()
        except Exception as exc:  # noqa: BLE001
            logger.error("Error storing job %s: %s", job.id, exc)
            skipped += 1
            continue

        data = job.to_document()
        if snapshot.exists:
            existing = snapshot.to_dict() or {}
            data["dateAdded"] = existing.get("dateAdded") or job.date_added
            data["lastUpdated"] = now_iso()
            batch.set(doc_ref, data, merge=True)
            updated += 1
        else:
            batch.set(doc_ref, data)
            stored += 1

    result = {"stored": stored, "updated": updated, "skipped": skipped}
    if stored or updated:
        try:
            batch.commit()
            logger.info("Stored: %d new, %d updated, %d skipped", stored, updated, skipped)
        except Exception as exc:  # noqa: BLE001
            logger.error("Batch commit error: %s", exc)
            result = {"stored": 0, "updated": 0, "skipped": len(records)}

    cleanup_old_jobs(client, max_jobs)
    return result
