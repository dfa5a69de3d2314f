"""Job feed ingestion: fetch, normalize and upsert external job postings."""
