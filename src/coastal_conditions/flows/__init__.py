"""
Prefect flows for the conditions pipeline.

Flows:
- ingest: Batch marine ingestion over grid cells into latest-conditions rows
- fetch: Weather, air quality and tides for one point into the live tier

Usage (local):
    python -m coastal_conditions.flows.ingest cells.json
    python -m coastal_conditions.flows.fetch

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'ingest-conditions/default'
"""
