"""
Activity feed / audit sink. Every create, update, delete and fee link writes one row.
"""

from sqlalchemy import JSON, Column, DateTime, Integer, String

from playgroup.db.session import Base, utcnow


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False)  # student, expense, inventory, fee, ...
    action = Column(String(50), nullable=False)  # create, update, delete, assign, ...
    details = Column(JSON, nullable=False, default=dict)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
