"""
Interfaces layer package.

HTTP surface of the vending service: FastAPI routers, Pydantic schemas,
caller identity and role gating. Routes call use cases and translate
their results; they hold no business rules.
"""
