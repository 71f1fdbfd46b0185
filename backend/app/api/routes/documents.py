"""Document endpoints - owner-scoped list and insert."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_document_store
from backend.app.db.context import RequestContext
from backend.app.db.repositories import DocumentStore, StorageError
from backend.app.models.common import DocType
from backend.app.models.documents import GeneratedDoc

router = APIRouter(prefix="/documents", tags=["documents"])


class CreateDocumentRequest(BaseModel):
    """Request body for POST /documents."""

    document_type: DocType
    input_data: dict[str, str] | None = None
    generated_text: str = Field(..., min_length=1)


class DocumentResponse(BaseModel):
    """A stored document."""

    id: str
    document_type: DocType
    generated_text: str
    input_data: dict[str, str] | None
    created_at: datetime

    @classmethod
    def from_doc(cls, doc: GeneratedDoc) -> "DocumentResponse":
        return cls(
            id=doc.id,
            document_type=doc.document_type,
            generated_text=doc.generated_text,
            input_data=doc.input_data,
            created_at=doc.created_at,
        )


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    documents: Annotated[DocumentStore, Depends(get_document_store)],
) -> list[DocumentResponse]:
    """List the caller's documents, newest first."""
    try:
        docs = await documents.list_for_owner(str(ctx.user_id))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return [DocumentResponse.from_doc(doc) for doc in docs]


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: CreateDocumentRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    documents: Annotated[DocumentStore, Depends(get_document_store)],
) -> DocumentResponse:
    """Persist a document under the caller."""
    try:
        doc = await documents.insert(
            str(ctx.user_id),
            document_type=body.document_type,
            input_data=body.input_data,
            generated_text=body.generated_text,
        )
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return DocumentResponse.from_doc(doc)
