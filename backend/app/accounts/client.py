"""Auth client interface used by the front-end workflow."""

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from backend.app.accounts.service import AccountService
from backend.app.models.auth import AuthEvent, AuthSession

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent, AuthSession | None], Awaitable[None]]


class AuthClient(Protocol):
    """Identity collaborator as seen from a browser session."""

    async def get_session(self) -> AuthSession | None:
        """Return the session currently held, if any."""
        ...

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in and notify listeners with SIGNED_IN.

        Raises:
            AuthError: If the credentials are rejected
        """
        ...

    async def sign_up(self, email: str, password: str) -> None:
        """Register without signing in.

        Raises:
            AuthError: If registration is rejected
        """
        ...

    async def sign_out(self) -> None:
        """Drop the session and notify listeners with SIGNED_OUT."""
        ...

    async def refresh_session(self) -> AuthSession | None:
        """Re-validate the held session; notifies TOKEN_REFRESHED or SIGNED_OUT."""
        ...

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        ...


class AuthEventHub:
    """Session holder and listener fan-out shared by auth client implementations."""

    def __init__(self) -> None:
        self._listeners: list[AuthListener] = []
        self._session: AuthSession | None = None

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                await listener(event, session)
            except Exception as e:
                logger.error(f"Auth listener failed on {event.value}: {e}")


class LocalAuthClient(AuthEventHub):
    """In-process auth client over an AccountService (tests, local dev)."""

    def __init__(self, service: AccountService) -> None:
        super().__init__()
        self._service = service

    async def get_session(self) -> AuthSession | None:
        return self._session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        session = await self._service.sign_in(email, password)
        await self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str) -> None:
        await self._service.sign_up(email, password)

    async def sign_out(self) -> None:
        if self._session is not None:
            await self._service.sign_out(self._session.access_token)
        await self._emit(AuthEvent.SIGNED_OUT, None)

    async def refresh_session(self) -> AuthSession | None:
        if self._session is None:
            return None
        identity = await self._service.resolve(self._session.access_token)
        if identity is None:
            await self._emit(AuthEvent.SIGNED_OUT, None)
            return None
        session = AuthSession(access_token=self._session.access_token, user=identity)
        await self._emit(AuthEvent.TOKEN_REFRESHED, session)
        return session
