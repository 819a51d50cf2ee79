"""Fee payment ledger. Rows are appended; several payments may settle one student + fee structure."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text

from playgroup.db.session import Base, utcnow


class FeePayment(Base):
    __tablename__ = "fee_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    fee_structure_id = Column(Integer, ForeignKey("fee_structures.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String(30), nullable=False)  # cash, card, bank_transfer, upi, cheque, other
    notes = Column(Text, nullable=True)
    receipt_number = Column(String(50), nullable=True, unique=True)
    # A discounted settlement: hides the remaining balance from pending reports
    discount_applied = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
