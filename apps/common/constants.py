"""
Mesa POS Constants

Centralized money and pagination constants shared by orders and promotions.
"""

from decimal import Decimal
from typing import Final

# ===============================================================================
# MONEY 💰
# ===============================================================================

MONEY_QUANTUM: Final[Decimal] = Decimal('0.01')     # Two decimal places for all amounts
MONEY_MAX_DIGITS: Final[int] = 12
MONEY_DECIMAL_PLACES: Final[int] = 2
ZERO_AMOUNT: Final[Decimal] = Decimal('0.00')
PERCENT_DIVISOR: Final[Decimal] = Decimal('100')

# ===============================================================================
# CALENDAR 📅
# ===============================================================================

# Day-of-week numbering: 0 = Sunday ... 6 = Saturday
ALL_DAYS_OF_WEEK: Final[tuple[int, ...]] = (0, 1, 2, 3, 4, 5, 6)
DAYS_IN_WEEK: Final[int] = 7

# ===============================================================================
# PAGINATION 📄
# ===============================================================================

DEFAULT_PAGE_SIZE: Final[int] = 20                  # Standard pagination size
MAX_PAGE_SIZE: Final[int] = 100                     # Maximum allowed page size
