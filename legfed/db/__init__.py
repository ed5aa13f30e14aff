"""
LegFed Database Package

This package provides database connection and session management
using SQLAlchemy.

Modules:
- engine: Database engine configuration and SessionLocal factory

Usage:
    from legfed.db.engine import SessionLocal

    with SessionLocal() as session:
        # run Chado queries or store Items
        pass

Environment Variables:
    DATABASE_URL: SQLAlchemy database connection URL
    DB_SCHEMA: Database schema name (optional)
"""
