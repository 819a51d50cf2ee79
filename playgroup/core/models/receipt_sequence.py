from sqlalchemy import Column, DateTime, Integer, String

from playgroup.db.session import Base, utcnow


class ReceiptSequence(Base):
    """Single-row counter for fee receipt numbers."""

    __tablename__ = "receipt_number_sequence"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prefix = Column(String(20), nullable=False, default="RC-")
    next_value = Column(Integer, nullable=False, default=1)
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
