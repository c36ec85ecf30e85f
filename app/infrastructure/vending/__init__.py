"""
Infrastructure adapters for the vending bounded context.

Each adapter implements the domain storage ports (ABCs):
an SQL store for PostgreSQL/SQLite and an in-memory store.
"""
