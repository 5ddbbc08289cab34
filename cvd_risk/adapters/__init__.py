"""Adapters: ingestion of prefetch documents and CSV cohorts, and card sinks."""
