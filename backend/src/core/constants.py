"""Application constants and configuration values."""

from decimal import Decimal

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 500

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite)
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Recurrence
WEEKLY_INTERVAL_DAYS = 7
BIWEEKLY_INTERVAL_DAYS = 14
SERIES_CREATION_HORIZON_MONTHS = 3  # Date-bounded horizon used when a series is first created
SERIES_EDIT_OCCURRENCE_COUNT = 12  # Count-bounded horizon used when an edit (re)generates a series

# Invoicing
PACKAGE_INVOICE_DUE_DAYS = 7
SESSION_INVOICE_DUE_DAYS = 15
COMMISSION_INVOICE_DUE_DAY = 10  # Day of the following month

# Commission policy
STANDARD_COMMISSION_RATE = Decimal("0.25")
ZERO_COMMISSION_RATE = Decimal("0")
SCHOOL_FREE_EXTERNAL_PATIENTS = 2  # First N external patients of a School professional carry no commission

# A scheduled appointment older than this (without a package invoice) awaits the professional's review
PENDING_REVIEW_HOURS = 27

# Appointment reminders
REMINDER_HOURS_BEFORE = 24
REMINDER_WINDOW_HOURS = 1  # Reminders go out for appointments 23-25 hours ahead
REMINDER_SCHEDULER_MAX_INSTANCES = 1  # Prevent overlapping scheduler runs

# Real-time events
NEW_NOTIFICATION_EVENT = "newNotification"
APPOINTMENT_STATUS_CHANGED_EVENT = "appointmentStatusChanged"
