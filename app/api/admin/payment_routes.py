"""
Admin Payment Routes - payment listing and verification
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from app.api.admin.dependencies import get_payment_service
from app.models.analytics import PaymentStatusUpdate
from app.models.entities import PaymentStatus
from app.services.payment_service import PaymentService
from app.utils.response_assembler import assemble

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/payments", tags=["Admin - Payments"])


@router.get("")
async def list_payments(
    status: Optional[PaymentStatus] = Query(None, description="Filter by payment status"),
    service: PaymentService = Depends(get_payment_service)
):
    return await assemble(
        "payment_list",
        service.list_payments(status),
        key="data",
        failure_error="Failed to load payments"
    )


@router.post("/{payment_id}/status")
async def update_payment_status(
    request: PaymentStatusUpdate,
    payment_id: str = Path(..., description="Payment id"),
    service: PaymentService = Depends(get_payment_service)
):
    """Verify a pending payment (pending -> completed or failed)"""
    logger.info(f"Payment {payment_id} status change requested: {request.expected_status.value} -> {request.status.value}")
    return await assemble(
        "payment_status_update",
        service.update_status(payment_id, request.status, expected_status=request.expected_status),
        failure_error="Failed to update payment status"
    )
