"""
SQLite Driver - transactional persistence driver for record models

Sits between an application's record model and an embedded SQLite
database: tracks which records are already materialized in memory,
gates every query on a schema version, and applies batches of writes
as a single all-or-nothing transaction.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
