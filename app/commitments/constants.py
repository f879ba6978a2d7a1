from __future__ import annotations

from decimal import Decimal

MONEY_QUANT = Decimal("0.01")

NOTIFICATION_TYPE_COMMITMENT = "commitment"
NOTIFICATION_TYPE_DISCOUNT = "discount"
SUBTYPE_COMMITMENT_CREATED = "commitment_created"
SUBTYPE_COMMITMENT_STATUS_CHANGED = "commitment_status_changed"
SUBTYPE_TIER_CHANGED = "tier_changed"

RELATED_KIND_COMMITMENT = "Commitment"
RELATED_KIND_DEAL = "Deal"

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"

AUDIT_INFO = "info"
AUDIT_SUCCESS = "success"
AUDIT_ERROR = "error"
