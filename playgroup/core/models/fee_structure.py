"""Fee structure: one fee obligation (amount + due date) for a class in an academic year."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text

from playgroup.db.session import Base, utcnow


class FeeStructure(Base):
    """Several structures may coexist for the same class and academic year."""

    __tablename__ = "fee_structures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False, index=True)
    academic_year_id = Column(Integer, ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    due_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
