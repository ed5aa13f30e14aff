"""
Warehouse Item model and the SQLAlchemy table used by the database sink.
"""

from legfed.models.item import Item, ItemFactory, RELATIONS, find_relation
