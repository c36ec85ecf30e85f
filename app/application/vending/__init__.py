"""
Application layer for the vending bounded context.

Use cases coordinate domain services and ports to fulfill
business operations. No framework or infrastructure imports allowed.
"""
