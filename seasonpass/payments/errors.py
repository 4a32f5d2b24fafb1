"""
Erreurs métier du parcours d'achat.
- PurchaseError: refus présenté tel quel à l'appelant (code stable + message + statut HTTP).
- TicketConflictError: la contrainte d'unicité (user_id, season_year) a rejeté l'insertion.
Le rendu HTTP est fait par le handler enregistré dans app_setup.exceptions.
"""

ACCOUNT_NOT_CONFIRMED = "account-not-confirmed"
TICKET_ALREADY_EXISTS = "ticket-already-exists"
PAYMENT_NOT_COMPLETED = "payment-not-completed"
OWNERSHIP_MISMATCH = "ownership-mismatch"
PAYMENT_PROVIDER_UNAVAILABLE = "payment-provider-unavailable"
PAYMENT_FAILED = "payment-failed"
PAYMENT_NOT_FOUND = "payment-not-found"
INVALID_PAYMENT_REQUEST = "invalid-payment-request"
INVALID_PAYMENT_METADATA = "invalid-payment-metadata"
INVALID_DISCOUNT = "invalid-discount"
MEMBER_NOT_FOUND = "member-not-found"

_DEFAULT_STATUS = {
    ACCOUNT_NOT_CONFIRMED: 403,
    TICKET_ALREADY_EXISTS: 409,
    PAYMENT_NOT_COMPLETED: 400,
    OWNERSHIP_MISMATCH: 403,
    PAYMENT_PROVIDER_UNAVAILABLE: 503,
    PAYMENT_FAILED: 400,
    PAYMENT_NOT_FOUND: 404,
    INVALID_PAYMENT_REQUEST: 400,
    INVALID_PAYMENT_METADATA: 400,
    INVALID_DISCOUNT: 400,
    MEMBER_NOT_FOUND: 404,
}

class PurchaseError(Exception):
    def __init__(self, code: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code or _DEFAULT_STATUS.get(code, 400)

    @property
    def retryable(self) -> bool:
        return self.code == PAYMENT_PROVIDER_UNAVAILABLE

class TicketConflictError(Exception):
    def __init__(self, user_id, season_year: int):
        super().__init__(f"season ticket already recorded user_id={user_id} season_year={season_year}")
        self.user_id = user_id
        self.season_year = season_year
