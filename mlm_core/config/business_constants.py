"""
Business constants.

Single source of truth for membership and commission rules.
"""

from decimal import Decimal

# Member credentials
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6

# Commission rate is stored in percent units (10 = 10%).
# Pairing commission = paired volume * commission_rate / COMMISSION_RATE_DIVISOR
COMMISSION_RATE_DIVISOR = Decimal("100")
COMMISSION_RATE_MAX = Decimal("100")

# Money precision (matches MoneyType scale)
MONEY_QUANT = Decimal("0.00000001")
