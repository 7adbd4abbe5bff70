"""
Binary commission services.

Leg volume accumulation, pairing and upline commission distribution.
"""

from mlm_core.services.commission.leg_volume import LegVolumeAccumulator
from mlm_core.services.commission.orchestrator import (
    CommissionOrchestrator,
    CommissionResult,
)
from mlm_core.services.commission.pairing import (
    PairingCalculator,
    PairingResult,
    calculate_commission,
)
from mlm_core.services.commission.statistics import CommissionStatisticsService

__all__ = [
    "CommissionOrchestrator",
    "CommissionResult",
    "CommissionStatisticsService",
    "LegVolumeAccumulator",
    "PairingCalculator",
    "PairingResult",
    "calculate_commission",
]
