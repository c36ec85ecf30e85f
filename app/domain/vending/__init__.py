"""
Vending bounded context: domain layer.

This module contains all domain logic for the vending context:
- Account balances (deposit, debit, drain)
- Product listings and stock
- Ownership checks on seller-owned listings
- Exact change in the fixed coin system
- Atomic purchase orchestration
"""
