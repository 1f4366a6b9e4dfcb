from typing import Callable, Optional

from courier_client.core import get_logger, set_action_context
from courier_client.domain.models import SessionStatus
from courier_client.application.errors import AuthError, CourierApiError
from courier_client.application.schemas import ProfileUpdate, User
from courier_client.infrastructure.api import CourierApi
from courier_client.infrastructure.token_store import TokenStore

logger = get_logger(__name__)

AuthListener = Callable[[SessionStatus, Optional[User]], None]


class SessionService:
    """Owns the courier's bearer token and profile.

    Other components read the token through ``get_token``/``require_token``
    and subscribe to sign-in/sign-out through ``on_auth_change``.
    """

    def __init__(self, api: CourierApi, store: TokenStore):
        self.api = api
        self.store = store
        self.status = SessionStatus.LOADING
        self.token: Optional[str] = None
        self.user: Optional[User] = None
        self._listeners: list[AuthListener] = []

    def get_token(self) -> Optional[str]:
        return self.token

    def require_token(self) -> str:
        if not self.token:
            raise AuthError("Not authenticated")
        return self.token

    def on_auth_change(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, status: SessionStatus, token: Optional[str], user: Optional[User]) -> None:
        changed = status != self.status or (user.id if user else None) != (self.user.id if self.user else None)
        self.status = status
        self.token = token
        self.user = user
        if user:
            set_action_context(courier_id=str(user.id))
        if changed:
            for listener in list(self._listeners):
                listener(status, user)

    async def restore(self) -> SessionStatus:
        """Re-validate the stored token, signing out if it no longer works."""
        stored = self.store.get()
        if not stored:
            self._set_state(SessionStatus.SIGNED_OUT, None, None)
            return self.status

        try:
            user = await self.api.me(stored)
        except CourierApiError as exc:
            logger.info(f"Stored session is no longer valid: {exc.message}")
            self.store.clear()
            self._set_state(SessionStatus.SIGNED_OUT, None, None)
            return self.status

        self._set_state(SessionStatus.SIGNED_IN, stored, user)
        return self.status

    async def sign_in(self, email: str, password: str) -> User:
        try:
            result = await self.api.sign_in(email, password)
        except CourierApiError:
            self._set_state(SessionStatus.SIGNED_OUT, None, None)
            raise
        self.store.set(result.token)
        self._set_state(SessionStatus.SIGNED_IN, result.token, result.user)
        logger.info("Courier signed in", extra={'extra_fields': {'user_id': result.user.id}})
        return result.user

    async def sign_out(self) -> None:
        current = self.token
        self.store.clear()
        self._set_state(SessionStatus.SIGNED_OUT, None, None)

        if current:
            try:
                await self.api.logout(current)
            except CourierApiError as exc:
                logger.warning(f"Server logout failed, ignoring: {exc.message}")

    def expire(self) -> None:
        """Drop the session after the server rejected the token."""
        if self.status == SessionStatus.SIGNED_OUT:
            return
        logger.warning("Session expired, signing out")
        self.store.clear()
        self._set_state(SessionStatus.SIGNED_OUT, None, None)

    async def update_profile(self, data: ProfileUpdate) -> Optional[User]:
        token = self.require_token()
        try:
            user = await self.api.update_profile(token, data)
        except AuthError:
            self.expire()
            raise
        self._set_state(SessionStatus.SIGNED_IN, token, user)
        await self.restore()
        return self.user
