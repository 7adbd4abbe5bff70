"""
Services package.

Business logic over the ledger store. Every public operation returns a
ServiceResult.
"""

from mlm_core.services.base_service import BaseService, ServiceResult
from mlm_core.services.commission import (
    CommissionOrchestrator,
    CommissionResult,
    CommissionStatisticsService,
    LegVolumeAccumulator,
    PairingCalculator,
    PairingResult,
)
from mlm_core.services.genealogy import GenealogyService, TreePlacementEngine
from mlm_core.services.member_service import MemberService
from mlm_core.services.package_service import PackageService, PurchaseSummary
from mlm_core.services.wallet_service import WalletService

__all__ = [
    "BaseService",
    "CommissionOrchestrator",
    "CommissionResult",
    "CommissionStatisticsService",
    "GenealogyService",
    "LegVolumeAccumulator",
    "MemberService",
    "PackageService",
    "PairingCalculator",
    "PairingResult",
    "PurchaseSummary",
    "ServiceResult",
    "TreePlacementEngine",
    "WalletService",
]
