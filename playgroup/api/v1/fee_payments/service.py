"""Fee payments: append-only ledger entries with sequential receipt numbers."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import parent_can_access_student
from playgroup.auth.schemas import CurrentUser
from playgroup.core.activity import log_activity
from playgroup.core.config import settings
from playgroup.core.exceptions import NotFoundError, ServiceError
from playgroup.core.models import FeePayment, FeeStructure, ReceiptSequence, Student

from .schemas import FeePaymentCreate, FeePaymentResponse, FeePaymentUpdate

logger = logging.getLogger(__name__)

RECEIPT_PAD_WIDTH = 3


def format_receipt_number(prefix: str, value: int) -> str:
    return f"{prefix}{value:0{RECEIPT_PAD_WIDTH}d}"


async def next_receipt_number(db: AsyncSession) -> str:
    """Take the next value from the receipt sequence. Caller commits."""
    seq = (
        await db.execute(select(ReceiptSequence).order_by(ReceiptSequence.id).limit(1).with_for_update())
    ).scalar_one_or_none()
    if seq is None:
        seq = ReceiptSequence(prefix=settings.receipt_prefix, next_value=1)
        db.add(seq)
        await db.flush()
    value = seq.next_value
    seq.next_value = value + 1
    return format_receipt_number(seq.prefix, value)


async def _student_ids_for(db: AsyncSession, current_user: CurrentUser) -> Optional[List[int]]:
    """Students a parent may see; None for every other role."""
    if not current_user.is_parent:
        return None
    students = (await db.execute(select(Student))).scalars().all()
    return [s.id for s in students if parent_can_access_student(current_user, s)]


async def list_fee_payments(
    db: AsyncSession,
    current_user: CurrentUser,
    student_id: Optional[int] = None,
    fee_structure_id: Optional[int] = None,
) -> List[FeePaymentResponse]:
    stmt = select(FeePayment)
    if student_id is not None:
        stmt = stmt.where(FeePayment.student_id == student_id)
    if fee_structure_id is not None:
        stmt = stmt.where(FeePayment.fee_structure_id == fee_structure_id)
    visible = await _student_ids_for(db, current_user)
    if visible is not None:
        stmt = stmt.where(FeePayment.student_id.in_(visible))
    stmt = stmt.order_by(FeePayment.payment_date.desc(), FeePayment.id.desc())
    result = await db.execute(stmt)
    return [FeePaymentResponse.model_validate(p) for p in result.scalars().all()]


async def get_fee_payment(
    db: AsyncSession,
    current_user: CurrentUser,
    payment_id: int,
) -> FeePaymentResponse:
    payment = await db.get(FeePayment, payment_id)
    if not payment:
        raise NotFoundError("Fee payment not found")
    visible = await _student_ids_for(db, current_user)
    if visible is not None and payment.student_id not in visible:
        raise NotFoundError("Fee payment not found")
    return FeePaymentResponse.model_validate(payment)


async def create_fee_payment(db: AsyncSession, payload: FeePaymentCreate) -> FeePaymentResponse:
    if not await db.get(Student, payload.student_id):
        raise NotFoundError("Student not found")
    if not await db.get(FeeStructure, payload.fee_structure_id):
        raise NotFoundError("Fee structure not found")

    receipt_number = (payload.receipt_number or "").strip() or None
    if receipt_number is not None:
        taken = await db.execute(select(FeePayment.id).where(FeePayment.receipt_number == receipt_number))
        if taken.first() is not None:
            raise ServiceError(f"Receipt number {receipt_number} is already used", status.HTTP_409_CONFLICT)
    else:
        receipt_number = await next_receipt_number(db)

    payment = FeePayment(
        student_id=payload.student_id,
        fee_structure_id=payload.fee_structure_id,
        amount=payload.amount,
        payment_date=payload.payment_date or date.today(),
        payment_method=payload.payment_method.value,
        notes=payload.notes,
        receipt_number=receipt_number,
        discount_applied=payload.discount_applied,
    )
    db.add(payment)
    await db.flush()
    log_activity(
        db,
        "fee",
        "payment",
        {
            "paymentId": payment.id,
            "studentId": payment.student_id,
            "feeStructureId": payment.fee_structure_id,
            "amount": str(payload.amount),
            "receiptNumber": receipt_number,
        },
    )
    await db.commit()
    await db.refresh(payment)
    logger.info("Recorded payment %s (%s) for student %s", payment.id, receipt_number, payment.student_id)
    return FeePaymentResponse.model_validate(payment)


async def update_fee_payment(
    db: AsyncSession,
    payment_id: int,
    payload: FeePaymentUpdate,
) -> Optional[FeePaymentResponse]:
    payment = await db.get(FeePayment, payment_id)
    if not payment:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("payment_method") is not None:
        data["payment_method"] = data["payment_method"].value
    for key, value in data.items():
        if value is not None or key == "notes":
            setattr(payment, key, value)
    log_activity(db, "fee", "update", {"paymentId": payment_id, "receiptNumber": payment.receipt_number})
    await db.commit()
    await db.refresh(payment)
    return FeePaymentResponse.model_validate(payment)


async def delete_fee_payment(db: AsyncSession, payment_id: int) -> bool:
    payment = await db.get(FeePayment, payment_id)
    if not payment:
        return False
    details = {
        "paymentId": payment_id,
        "studentId": payment.student_id,
        "amount": str(Decimal(str(payment.amount))),
        "receiptNumber": payment.receipt_number,
    }
    await db.delete(payment)
    log_activity(db, "fee", "delete", details)
    await db.commit()
    return True
