"""Database-agnostic type definitions for SQLAlchemy models.

Columns declared with these types work on both PostgreSQL (production) and
SQLite (local runs and tests).
"""
from sqlalchemy import Numeric, Uuid

# Native UUID on PostgreSQL, CHAR(32) on SQLite
UUIDType = Uuid

# Quantities carry four decimals so converted UOM amounts survive a round trip
QuantityType = Numeric(18, 4)

MoneyType = Numeric(14, 2)
