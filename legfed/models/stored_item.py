import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class StoredItem(Base):
    __tablename__ = 'legfed_item'
    __table_args__ = (
        Index('legfed_item_uk', 'run_id', 'identifier', unique=True),
        Index('legfed_item_class_i', 'class_name'),
        {'comment': 'Items produced by one converter run, awaiting integration into the warehouse.'}
    )

    item_no: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, comment='Assigned unique identifier for a stored item.')
    run_id: Mapped[str] = mapped_column(String(64), nullable=False, comment='Identifier of the converter run that produced the item.')
    identifier: Mapped[str] = mapped_column(String(40), nullable=False, comment='Run-unique item identifier, e.g. 3_12.')
    class_name: Mapped[str] = mapped_column(String(60), nullable=False, comment='Warehouse class of the item.')
    attributes: Mapped[dict] = mapped_column(JSON, nullable=False, comment='Attribute name to value.')
    references: Mapped[dict] = mapped_column(JSON, nullable=False, comment='Reference name to item identifier.')
    collections: Mapped[dict] = mapped_column(JSON, nullable=False, comment='Collection name to list of item identifiers.')
    date_created: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, server_default=func.now(), comment='Date the record was entered into the database.')
