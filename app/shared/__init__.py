"""
Shared module package.

Cross-cutting concerns of the HTTP service: domain error mapping,
security headers and body limits, rate limiting, logging setup.
"""
