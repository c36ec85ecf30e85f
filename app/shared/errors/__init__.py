"""
Shared error handling package.

Translates vending domain errors into JSON error responses with
stable status codes.
"""
