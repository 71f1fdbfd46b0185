"""HTTP collaborator clients used by the Streamlit front-end.

Each call opens its own httpx.AsyncClient so a client object can be reused
across Streamlit reruns, which each run on a fresh event loop.
"""

import logging
from typing import Any

import httpx

from backend.app.accounts.client import AuthEventHub
from backend.app.accounts.service import AuthError
from backend.app.db.repositories import StorageError
from backend.app.llm.client import GenerationError, GenerationRateLimited
from backend.app.models.auth import AuthEvent, AuthSession, Identity
from backend.app.models.common import DocType
from backend.app.models.documents import GeneratedDoc, UsageLogEntry, UserProfile

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Unable to reach the server. Please check your connection."


def _detail(response: httpx.Response) -> str | None:
    """Pull FastAPI's `detail` string out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return None
    detail = body.get("detail") if isinstance(body, dict) else None
    return detail if isinstance(detail, str) else None


class ApiTransport:
    """Base URL, timeout and optional transport shared by the clients."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def request(
        self, method: str, path: str, *, token: str | None = None, **kwargs: Any
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            return await client.request(method, path, headers=headers, **kwargs)


class HttpAuthClient(AuthEventHub):
    """AuthClient over the /auth endpoints."""

    def __init__(self, api: ApiTransport) -> None:
        super().__init__()
        self._api = api

    async def get_session(self) -> AuthSession | None:
        return self._session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._call("POST", "/auth/signin", json={"email": email, "password": password})
        if response.status_code != 200:
            raise AuthError(_detail(response) or "Invalid login credentials")

        body = response.json()
        session = AuthSession(
            access_token=body["access_token"],
            user=Identity(user_id=body["user"]["user_id"], email=body["user"]["email"]),
        )
        await self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str) -> None:
        response = await self._call("POST", "/auth/signup", json={"email": email, "password": password})
        if response.status_code != 201:
            raise AuthError(_detail(response) or "Sign up failed")

    async def sign_out(self) -> None:
        token = self.access_token
        if token is not None:
            try:
                await self._api.request("POST", "/auth/signout", token=token)
            except httpx.HTTPError as e:
                # The local session is dropped regardless
                logger.warning(f"Sign out request failed: {e}")
        await self._emit(AuthEvent.SIGNED_OUT, None)

    async def refresh_session(self) -> AuthSession | None:
        token = self.access_token
        if token is None:
            return None

        try:
            response = await self._api.request("GET", "/auth/session", token=token)
        except httpx.HTTPError as e:
            logger.warning(f"Session refresh failed: {e}")
            return self._session

        if response.status_code == 401:
            await self._emit(AuthEvent.SIGNED_OUT, None)
            return None
        if response.status_code != 200:
            return self._session

        body = response.json()
        session = AuthSession(
            access_token=token, user=Identity(user_id=body["user_id"], email=body["email"])
        )
        await self._emit(AuthEvent.TOKEN_REFRESHED, session)
        return session

    async def _call(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._api.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise AuthError(UNREACHABLE_MESSAGE) from e


class _StoreClient:
    """Bearer-scoped storage calls; the server derives the owner from the token."""

    def __init__(self, api: ApiTransport, auth: AuthEventHub) -> None:
        self._api = api
        self._auth = auth

    async def _call(self, method: str, path: str, *, expected: int = 200, **kwargs: Any) -> Any:
        token = self._auth.access_token
        if token is None:
            raise StorageError("not signed in")

        try:
            response = await self._api.request(method, path, token=token, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"{method} {path} failed: {type(e).__name__}") from e

        if response.status_code == 404:
            return None
        if response.status_code != expected:
            raise StorageError(
                f"{method} {path} returned {response.status_code}: {_detail(response) or ''}"
            )
        return response.json()


class HttpDocumentStore(_StoreClient):
    """DocumentStore over /documents."""

    async def insert(
        self,
        user_id: str,
        *,
        document_type: DocType,
        input_data: dict[str, str] | None,
        generated_text: str,
    ) -> GeneratedDoc:
        body = await self._call(
            "POST",
            "/documents",
            expected=201,
            json={
                "document_type": document_type.value,
                "input_data": input_data,
                "generated_text": generated_text,
            },
        )
        if body is None:
            raise StorageError("document insert returned 404")
        return GeneratedDoc.model_validate(body)

    async def list_for_owner(self, user_id: str) -> list[GeneratedDoc]:
        body = await self._call("GET", "/documents")
        return [GeneratedDoc.model_validate(item) for item in body or []]


class HttpProfileStore(_StoreClient):
    """ProfileStore over /profile.

    Profiles are created server-side on sign-up, so `create` is not offered here.
    """

    async def get(self, user_id: str) -> UserProfile | None:
        body = await self._call("GET", "/profile")
        return UserProfile.model_validate(body) if body is not None else None

    async def create(
        self, user_id: str, email: str, *, plan: str, credits_remaining: int
    ) -> UserProfile:
        raise StorageError("profiles are created on sign-up")

    async def update_credits(self, user_id: str, credits_remaining: int) -> UserProfile:
        body = await self._call(
            "PATCH", "/profile", json={"credits_remaining": max(0, credits_remaining)}
        )
        if body is None:
            raise StorageError(f"profile {user_id} not found")
        return UserProfile.model_validate(body)


class HttpUsageLogStore(_StoreClient):
    """UsageLogStore over /usage-logs."""

    async def append(
        self, user_id: str, *, action: str, credits_used: int, doc_id: str | None = None
    ) -> UsageLogEntry:
        body = await self._call(
            "POST",
            "/usage-logs",
            expected=201,
            json={"action": action, "credits_used": credits_used, "doc_id": doc_id},
        )
        if body is None:
            raise StorageError("usage log append returned 404")
        return UsageLogEntry.model_validate(body)


class HttpDocumentGenerator:
    """DocumentGenerator over POST /generate."""

    def __init__(self, api: ApiTransport, auth: AuthEventHub) -> None:
        self._api = api
        self._auth = auth

    async def generate(self, document_type: DocType, field_values: dict[str, str]) -> str:
        try:
            response = await self._api.request(
                "POST",
                "/generate",
                token=self._auth.access_token,
                json={"document_type": document_type.value, "field_values": field_values},
            )
        except httpx.HTTPError as e:
            logger.error(f"Generation request failed: {e}")
            raise GenerationError() from e

        if response.status_code == 429:
            raise GenerationRateLimited()
        if response.status_code != 200:
            logger.error(f"Generation returned {response.status_code}: {_detail(response)}")
            raise GenerationError()

        text = (response.json().get("text") or "").strip()
        if not text:
            raise GenerationError("The AI returned an empty response. Please try again.")
        return text
