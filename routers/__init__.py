from routers.auth import router as auth_router
from routers.users import router as users_router
from routers.profile import router as profile_router
from routers.support import router as support_router
from routers.medicines import router as medicines_router
from routers.cart import router as cart_router
from routers.medicine_requests import router as medicine_requests_router
from routers.orders import router as orders_router
from routers.donations import router as donations_router
from routers.daily_updates import router as daily_updates_router
from routers.reviews import router as reviews_router
from routers.service_reviews import router as service_reviews_router
from routers.payments import router as payments_router
from routers.disputes import router as disputes_router
from routers.smart_doctor import router as smart_doctor_router
from routers.medicine_reminders import router as medicine_reminders_router
from routers.medical_profile import router as medical_profile_router
from routers.customer_points import router as customer_points_router
from routers.revenue_adjustments import router as revenue_adjustments_router

__all__ = [
    "auth_router",
    "users_router",
    "profile_router",
    "support_router",
    "medicines_router",
    "cart_router",
    "medicine_requests_router",
    "orders_router",
    "donations_router",
    "daily_updates_router",
    "reviews_router",
    "service_reviews_router",
    "payments_router",
    "disputes_router",
    "smart_doctor_router",
    "medicine_reminders_router",
    "medical_profile_router",
    "customer_points_router",
    "revenue_adjustments_router",
]
