"""
LegFed Core Package

This package contains the loader settings.

Modules:
- settings: pydantic-settings configuration read from the environment / .env

Environment Variables:
    DATABASE_URL: Chado database (or database sink) connection URL
    ENTREZ_EMAIL: Contact address for NCBI Entrez
    PUBLICATION_LOOKUP: off | fail | skip
"""
