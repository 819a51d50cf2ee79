"""School classes (e.g. Toddlers, Nursery). Model named SchoolClass to avoid Python 'class' keyword."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from playgroup.db.session import Base, utcnow


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=True, index=True)
    capacity = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
