"""
Infrastructure layer package.

Storage adapters implementing the vending ports: a SQLAlchemy store for
PostgreSQL or SQLite and a process-local in-memory store.
"""
