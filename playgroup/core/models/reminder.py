from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from playgroup.db.session import Base, utcnow


class Reminder(Base):
    """Fee reminder addressed to a student's guardians. Recorded only; delivery is external."""

    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_structure_id = Column(Integer, ForeignKey("fee_structures.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending | sent
    sent_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
