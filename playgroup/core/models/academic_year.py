from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String

from playgroup.db.session import Base, utcnow


class AcademicYear(Base):
    """
    School academic year (e.g. "2024-2025"). Only one year can be is_current = true.
    Cannot be deleted while classes, batches or fee structures reference it.
    """

    __tablename__ = "academic_years"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
