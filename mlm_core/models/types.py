"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, balances and leg volumes
# Precision: 18 digits total, 8 after decimal point
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Commission rate type (percent units, e.g. 10.0000 = 10%)
# Precision: 10 digits total, 4 after decimal point
RatePercentType = DECIMAL(10, 4)
