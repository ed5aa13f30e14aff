"""
LegFed data loaders.

Converts legume genomics flat files and Chado database contents into a
graph of typed Items for the data warehouse.
"""

__version__ = "0.3.0"
