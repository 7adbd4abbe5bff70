"""
MLM core.

Binary genealogy tree placement, leg-volume accumulation and
pairing-commission engine with a dual-wallet ledger.
"""

__version__ = "0.1.0"
