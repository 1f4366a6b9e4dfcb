from typing import Optional

from courier_client.core import get_logger, set_action_context, generate_action_id
from courier_client.application.errors import (
    AuthError,
    CourierApiError,
    ServerError,
    UnexpectedResponseError,
)
from courier_client.application.session import SessionService
from courier_client.infrastructure.api import CourierApi

logger = get_logger(__name__)


class ViewModel:
    """Base for screen state holders.

    Subclasses call the API inside their action methods and hand any
    ``CourierApiError`` to ``_fail``, which records the user-facing message,
    logs it, and forces a sign-out when the token was rejected.
    """

    def __init__(self, api: CourierApi, session: SessionService):
        self.api = api
        self.session = session
        self.error: Optional[str] = None

    def _begin(self, action: str) -> str:
        self.error = None
        set_action_context(action_id=generate_action_id())
        return self.session.require_token()

    def _fail(self, exc: CourierApiError, action: str) -> None:
        self.error = exc.message
        fields = {'action': action, 'error_type': type(exc).__name__, 'status_code': exc.status_code}
        if isinstance(exc, (ServerError, UnexpectedResponseError)):
            logger.error(f"{action} failed: {exc.message}", extra={'extra_fields': fields})
        else:
            logger.warning(f"{action} failed: {exc.message}", extra={'extra_fields': fields})
        if isinstance(exc, AuthError):
            self.session.expire()
