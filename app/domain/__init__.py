"""
Domain layer package.

Balances, listings, coin change and the atomic purchase protocol,
expressed against port interfaces. No framework imports and no IO.
"""
