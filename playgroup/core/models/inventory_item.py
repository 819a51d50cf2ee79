from sqlalchemy import Column, DateTime, Integer, String, Text

from playgroup.db.session import Base, utcnow


class InventoryItem(Base):
    """Stock item. Low stock when quantity < min_quantity."""

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(50), nullable=False)
    min_quantity = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
