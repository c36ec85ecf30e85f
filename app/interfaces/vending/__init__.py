"""
Interfaces for the vending bounded context.

FastAPI routes, request/response schemas and dependency wiring.
"""
