from enum import Enum
from typing import Optional

class OrderStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    ASSIGNED_TO_DELIVERY = "ASSIGNED_TO_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    DELAYED = "DELAYED"
    REJECTED = "REJECTED"

    @classmethod
    def _missing_(cls, value) -> Optional["OrderStatus"]:
        # The backend calls a delayed order REPORTED; DELAY also turns up
        if isinstance(value, str) and value.upper() in ("REPORTED", "DELAY"):
            return cls.DELAYED
        return None

    @property
    def wire_value(self) -> str:
        """Value the backend expects in requests and query strings."""
        return BACKEND_VALUES.get(self, self.value)

# Backend enum names that differ from ours
BACKEND_VALUES = {OrderStatus.DELAYED: "REPORTED"}

class AttemptOutcome(str, Enum):
    """Outcome recorded on a delivery attempt, as labelled by the backend."""
    TENTATIVE = "TENTATIVE"
    FAILED = "ÉCHEC"
    SUCCEEDED = "RÉUSSIE"
    CUSTOMER_UNAVAILABLE = "CLIENT_INDISPONIBLE"
    WRONG_ADDRESS = "ADRESSE_ERRONÉE"
    REFUSED = "REFUSÉ"
    OTHER = "AUTRE"

class SessionStatus(str, Enum):
    LOADING = "loading"
    SIGNED_OUT = "signedOut"
    SIGNED_IN = "signedIn"

# Payment method values the backend uses for cash collected by the courier
COD_PAYMENT_METHODS = frozenset({"COD", "CASH", "CASH_ON_DELIVERY"})
