# Package initialization
# Import all models to ensure relationships are properly established
from .user import User
from .professional import Professional
from .company import Company
from .patient import Patient
from .professional_assignment import ProfessionalAssignment
from .appointment_series import AppointmentSeries
from .appointment import Appointment
from .invoice import Invoice
from .professional_billing import ProfessionalBilling
from .notification import Notification

__all__ = [
    "User",
    "Professional",
    "Company",
    "Patient",
    "ProfessionalAssignment",
    "AppointmentSeries",
    "Appointment",
    "Invoice",
    "ProfessionalBilling",
    "Notification",
]
