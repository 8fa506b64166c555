"""
Admin API Module - reporting endpoints for platform operators
"""
from app.api.admin.analytics_routes import router as analytics_router
from app.api.admin.notification_routes import router as notification_router
from app.api.admin.payment_routes import router as payment_router

admin_routers = [analytics_router, notification_router, payment_router]

__all__ = ["admin_routers", "analytics_router", "notification_router", "payment_router"]
