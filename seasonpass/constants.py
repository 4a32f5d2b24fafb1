"""
Constantes partagées (statuts, rôles, types de billets, règles de validation).
Source unique pour les modèles pydantic, les services et la console admin.
"""

# Statuts membre
STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_SUSPENDED = "suspended"
USER_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_SUSPENDED)

# Rôles admin (table admin_users)
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)

# Types d'abonnement
TICKET_TYPE_REGULAR = "regular"
TICKET_TYPE_VIP = "vip"
TICKET_TYPE_STUDENT = "student"
TICKET_TYPES = (TICKET_TYPE_REGULAR, TICKET_TYPE_VIP, TICKET_TYPE_STUDENT)

# Statut Stripe d'un PaymentIntent payé
PAYMENT_SUCCEEDED = "succeeded"

# Règles de validation
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 100
USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DISCOUNT_MIN = 0
DISCOUNT_MAX = 100

# Pagination console admin
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
