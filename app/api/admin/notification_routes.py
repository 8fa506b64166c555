"""
Admin Notification Routes
"""
from fastapi import APIRouter, Depends

from app.api.admin.dependencies import get_notification_service
from app.services.notification_service import NotificationService
from app.utils.response_assembler import assemble

router = APIRouter(prefix="/admin/notifications", tags=["Admin - Notifications"])


@router.get("")
async def get_notifications(service: NotificationService = Depends(get_notification_service)):
    """System notifications derived from pending work and recent sign-ups"""
    return await assemble(
        "notifications",
        service.generate(),
        key="notifications",
        failure_error="Failed to load notifications"
    )


@router.post("/mark-all-read")
async def mark_all_notifications_read(service: NotificationService = Depends(get_notification_service)):
    return await assemble(
        "mark_all_notifications_read",
        service.mark_all_as_read(),
        failure_error="Failed to mark notifications as read"
    )
