"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 200
DEFAULT_APPROVALS_LIMIT = 500
DASHBOARD_WINDOW_DAYS = 30

LEAVE_AMOUNT_STEP = Decimal("0.5")
MAX_LEAVE_AMOUNT = Decimal("365")
# stays well inside the DECIMAL(6,1) balance columns
MAX_BALANCE = Decimal("9999.5")

MIN_PASSWORD_LENGTH = 8
GENERATED_PASSWORD_LENGTH = 16
PASSWORD_SPECIAL_CHARS = "!@#$%^&*()-_=+[]{};:,.?/"
