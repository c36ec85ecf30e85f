"""
Application layer package.

One use case class per operation, each with a single ``execute`` method
taking a command or query DTO. Use cases delegate to the domain
TransactionCoordinator and never touch storage directly.
"""
