from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from playgroup.db.session import Base, utcnow

DEFAULT_BATCH_CAPACITY = 20


class Batch(Base):
    """Cohort of students within a class for one academic year."""

    __tablename__ = "batches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False, index=True)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False, index=True)
    capacity = Column(Integer, nullable=False, default=DEFAULT_BATCH_CAPACITY)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
