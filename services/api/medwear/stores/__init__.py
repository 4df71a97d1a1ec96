"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: DB session, ORM base, connection pooling
- Redis: catalog cache, receipt counters

No business/stock logic in stores - that belongs in services.
"""
