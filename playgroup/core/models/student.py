from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from playgroup.db.session import Base, utcnow


class Student(Base):
    """
    Enrolled child. class_id, batch_id and fee_structure_id are all optional.
    fee_structure_id caches the student's current fee obligation and is rewritten
    by batch assignment and fee structure create/update/clone.
    """

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False)
    date_of_birth = Column(String(20), nullable=False)
    age = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=False)
    guardian_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    # Guardian email; parents are matched to students by it
    email = Column(String(255), nullable=True, index=True)
    address = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active | inactive | on_leave
    notes = Column(Text, nullable=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="SET NULL"), nullable=True, index=True)
    fee_structure_id = Column(Integer, ForeignKey("fee_structures.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
