from models.user import User
from models.medicine import Medicine
from models.cart import CartItem
from models.order import Order, OrderItem
from models.payment import Payment
from models.donation import Donation
from models.medicine_request import MedicineRequest
from models.daily_update import DailyUpdate
from models.review import Review, ServiceReview
from models.dispute import Dispute
from models.reminder import MedicineReminder
from models.medical_profile import MedicalProfile
from models.points import CustomerPoint
from models.revenue import RevenueAdjustment
from models.support import SupportTicket
from models.consultation import Consultation
from models.notification import Notification

__all__ = [
    "User",
    "Medicine",
    "CartItem",
    "Order",
    "OrderItem",
    "Payment",
    "Donation",
    "MedicineRequest",
    "DailyUpdate",
    "Review",
    "ServiceReview",
    "Dispute",
    "MedicineReminder",
    "MedicalProfile",
    "CustomerPoint",
    "RevenueAdjustment",
    "SupportTicket",
    "Consultation",
    "Notification",
]
