"""
Validation modules for booking normalization.

Includes:
- Party total vs gender breakdown mismatch detection
- Missing headcount and rebooked-placeholder checks
- Manifest totals reconciliation
"""

from .party_validator import (
    check_party_total_mismatch,
    check_missing_headcount,
    check_rebooked_zeroed
)
from .manifest_validator import check_group_totals, check_manifest_totals

__all__ = [
    'check_party_total_mismatch',
    'check_missing_headcount',
    'check_rebooked_zeroed',
    'check_group_totals',
    'check_manifest_totals'
]
