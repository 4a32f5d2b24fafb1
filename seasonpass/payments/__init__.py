"""
Module 'payments' (feature-first): point d'entrée public.
Réunit prix, éligibilité, metadata Stripe, client Stripe, repository BD et services.
"""

from .errors import PurchaseError, TicketConflictError
from .pricing import compute_charge, discount_amount, price_breakdown, to_major_units
from .entitlement import can_purchase, ensure_can_purchase
from .metadata import make_metadata, extract_metadata
from .stripe_client import require_stripe, create_customer, create_payment_intent, retrieve_payment_intent, parse_event
from .repository import (
    find_ticket,
    find_ticket_by_payment_intent,
    record_season_ticket,
    recompute_season_ticket_flags,
)
from .service import get_pricing, begin_purchase, confirm_purchase, handle_webhook_event

__all__ = [
    # errors
    "PurchaseError",
    "TicketConflictError",
    # pricing
    "compute_charge",
    "discount_amount",
    "price_breakdown",
    "to_major_units",
    # entitlement
    "can_purchase",
    "ensure_can_purchase",
    # metadata
    "make_metadata",
    "extract_metadata",
    # stripe
    "require_stripe",
    "create_customer",
    "create_payment_intent",
    "retrieve_payment_intent",
    "parse_event",
    # repository
    "find_ticket",
    "find_ticket_by_payment_intent",
    "record_season_ticket",
    "recompute_season_ticket_flags",
    # services
    "get_pricing",
    "begin_purchase",
    "confirm_purchase",
    "handle_webhook_event",
]
