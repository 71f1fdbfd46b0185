"""SQL implementations of repository interfaces."""

import uuid

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Account, AuthToken, DocumentRow, UsageLog, UserProfileRow
from backend.app.db.repositories import AccountRecord, StorageError, TokenRecord
from backend.app.models.common import DocType
from backend.app.models.documents import GeneratedDoc, UsageLogEntry, UserProfile, utcnow


def _as_uuid(value: str) -> uuid.UUID:
    """Parse an id, mapping malformed input to StorageError."""
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError) as e:
        raise StorageError(f"invalid id: {value!r}") from e


def _to_doc(row: DocumentRow) -> GeneratedDoc:
    return GeneratedDoc(
        id=str(row.id),
        document_type=DocType(row.document_type),
        generated_text=row.generated_text,
        input_data=row.input_data,
        created_at=row.created_at,
    )


def _to_profile(row: UserProfileRow) -> UserProfile:
    return UserProfile(
        id=str(row.id),
        email=row.email,
        plan=row.plan,
        credits_remaining=row.credits_remaining,
    )


class SqlDocumentStore:
    """SQL implementation of DocumentStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert(
        self,
        user_id: str,
        *,
        document_type: DocType,
        input_data: dict[str, str] | None,
        generated_text: str,
    ) -> GeneratedDoc:
        """Persist a document."""
        row = DocumentRow(
            id=uuid.uuid4(),
            user_id=_as_uuid(user_id),
            document_type=document_type.value,
            input_data=input_data,
            generated_text=generated_text,
            created_at=utcnow(),
        )
        try:
            self._session.add(row)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageError(f"document insert failed: {type(e).__name__}") from e

        return _to_doc(row)

    async def list_for_owner(self, user_id: str) -> list[GeneratedDoc]:
        """List the owner's documents, newest first."""
        try:
            result = await self._session.execute(
                select(DocumentRow)
                .where(DocumentRow.user_id == _as_uuid(user_id))
                .order_by(DocumentRow.created_at.desc())
            )
        except SQLAlchemyError as e:
            raise StorageError(f"document list failed: {type(e).__name__}") from e

        return [_to_doc(row) for row in result.scalars().all()]


class SqlProfileStore:
    """SQL implementation of ProfileStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> UserProfile | None:
        """Read a profile."""
        try:
            row = await self._session.get(UserProfileRow, _as_uuid(user_id))
            if row is None:
                return None
            await self._session.refresh(row)
        except SQLAlchemyError as e:
            raise StorageError(f"profile read failed: {type(e).__name__}") from e
        return _to_profile(row)

    async def create(
        self, user_id: str, email: str, *, plan: str, credits_remaining: int
    ) -> UserProfile:
        """Create a profile."""
        row = UserProfileRow(
            id=_as_uuid(user_id), email=email, plan=plan, credits_remaining=credits_remaining
        )
        try:
            self._session.add(row)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageError(f"profile create failed: {type(e).__name__}") from e

        return _to_profile(row)

    async def update_credits(self, user_id: str, credits_remaining: int) -> UserProfile:
        """Overwrite the credit balance."""
        try:
            row = await self._session.get(UserProfileRow, _as_uuid(user_id))
        except SQLAlchemyError as e:
            raise StorageError(f"profile read failed: {type(e).__name__}") from e
        if row is None:
            raise StorageError(f"profile {user_id} not found")

        row.credits_remaining = max(0, credits_remaining)
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageError(f"profile update failed: {type(e).__name__}") from e

        await self._session.refresh(row)
        return _to_profile(row)


class SqlUsageLogStore:
    """SQL implementation of UsageLogStore.

    The credit debit runs as a conditional UPDATE in the same transaction as
    the insert, so concurrent appends cannot drive the balance below zero.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self, user_id: str, *, action: str, credits_used: int, doc_id: str | None = None
    ) -> UsageLogEntry:
        """Append an entry and debit the owner's credits."""
        owner = _as_uuid(user_id)
        row = UsageLog(
            id=uuid.uuid4(),
            user_id=owner,
            action=action,
            credits_used=credits_used,
            doc_id=_as_uuid(doc_id) if doc_id is not None else None,
            created_at=utcnow(),
        )
        try:
            self._session.add(row)
            if credits_used > 0:
                await self._session.execute(
                    update(UserProfileRow)
                    .where(UserProfileRow.id == owner)
                    .values(
                        credits_remaining=case(
                            (
                                UserProfileRow.credits_remaining > credits_used,
                                UserProfileRow.credits_remaining - credits_used,
                            ),
                            else_=0,
                        )
                    )
                )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageError(f"usage log append failed: {type(e).__name__}") from e

        return UsageLogEntry(
            id=str(row.id),
            user_id=user_id,
            action=action,
            credits_used=credits_used,
            doc_id=doc_id,
            created_at=row.created_at,
        )


class SqlAccountStore:
    """SQL implementation of AccountStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _to_record(row: Account) -> AccountRecord:
        return AccountRecord(
            user_id=str(row.user_id),
            email=row.email,
            password_hash=row.password_hash,
            created_at=row.created_at,
        )

    async def create_account(self, email: str, password_hash: str) -> AccountRecord:
        """Create an account."""
        row = Account(
            user_id=uuid.uuid4(), email=email, password_hash=password_hash, created_at=utcnow()
        )
        try:
            self._session.add(row)
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise StorageError(f"account {email} already exists") from e

        return self._to_record(row)

    async def get_account_by_email(self, email: str) -> AccountRecord | None:
        """Look up an account by email."""
        result = await self._session.execute(select(Account).where(Account.email == email))
        row = result.scalar_one_or_none()
        return self._to_record(row) if row is not None else None

    async def get_account(self, user_id: str) -> AccountRecord | None:
        """Look up an account by id."""
        row = await self._session.get(Account, _as_uuid(user_id))
        return self._to_record(row) if row is not None else None

    async def save_token(self, token: TokenRecord) -> None:
        """Store a token."""
        self._session.add(
            AuthToken(
                token_hash=token.token_hash,
                user_id=_as_uuid(token.user_id),
                expires_at=token.expires_at,
                revoked=token.revoked,
            )
        )
        await self._session.commit()

    async def get_token(self, token_hash: str) -> TokenRecord | None:
        """Look up a token."""
        row = await self._session.get(AuthToken, token_hash)
        if row is None:
            return None
        return TokenRecord(
            token_hash=row.token_hash,
            user_id=str(row.user_id),
            expires_at=row.expires_at,
            revoked=row.revoked,
        )

    async def revoke_token(self, token_hash: str) -> None:
        """Revoke a token."""
        await self._session.execute(
            update(AuthToken).where(AuthToken.token_hash == token_hash).values(revoked=True)
        )
        await self._session.commit()
