from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.dependencies import get_current_user
from playgroup.auth.rbac import check_permission
from playgroup.auth.schemas import CurrentUser
from playgroup.core.exceptions import ServiceError
from playgroup.db.session import get_db

from .schemas import FeePaymentCreate, FeePaymentResponse, FeePaymentUpdate
from . import service

router = APIRouter(prefix="/api/v1/fee-payments", tags=["fee-payments"])


@router.get(
    "",
    response_model=List[FeePaymentResponse],
    dependencies=[Depends(check_permission("fee_payments", "read"))],
)
async def list_fee_payments(
    student_id: Optional[int] = Query(None, alias="studentId"),
    fee_structure_id: Optional[int] = Query(None, alias="feeStructureId"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[FeePaymentResponse]:
    return await service.list_fee_payments(
        db, current_user, student_id=student_id, fee_structure_id=fee_structure_id
    )


@router.post(
    "",
    response_model=FeePaymentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fee_payments", "create"))],
)
async def create_fee_payment(payload: FeePaymentCreate, db: AsyncSession = Depends(get_db)) -> FeePaymentResponse:
    try:
        return await service.create_fee_payment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{payment_id}",
    response_model=FeePaymentResponse,
    dependencies=[Depends(check_permission("fee_payments", "read"))],
)
async def get_fee_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> FeePaymentResponse:
    try:
        return await service.get_fee_payment(db, current_user, payment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{payment_id}",
    response_model=FeePaymentResponse,
    dependencies=[Depends(check_permission("fee_payments", "update"))],
)
async def update_fee_payment(
    payment_id: int,
    payload: FeePaymentUpdate,
    db: AsyncSession = Depends(get_db),
) -> FeePaymentResponse:
    payment = await service.update_fee_payment(db, payment_id, payload)
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee payment not found")
    return payment


@router.delete(
    "/{payment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("fee_payments", "delete"))],
)
async def delete_fee_payment(payment_id: int, db: AsyncSession = Depends(get_db)) -> None:
    deleted = await service.delete_fee_payment(db, payment_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee payment not found")
