"""Test JSON schema export and roundtrip validation."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from backend.app.catalog import list_templates
from backend.app.models import DocConfig, DocType, GeneratedDoc, UserProfile
from scripts.export_schemas import SCHEMA_MODELS, main


def test_schemas_exported(tmp_path: Path) -> None:
    """Test that one schema file is written per model."""
    written = main(tmp_path)

    assert sorted(p.name for p in written) == sorted(f"{n}.schema.json" for n in SCHEMA_MODELS)
    schema = json.loads((tmp_path / "GeneratedDoc.schema.json").read_text())
    assert set(schema["required"]) == {"id", "document_type", "generated_text"}
    assert "Leave Letter" in json.dumps(schema)


def test_catalog_roundtrip() -> None:
    """Test every catalog template survives a JSON round trip."""
    for config in list_templates():
        restored = DocConfig.model_validate_json(config.model_dump_json())
        assert restored == config


def test_generated_doc_roundtrip() -> None:
    doc = GeneratedDoc(
        id="local-abc123",
        document_type=DocType.LEAVE_LETTER,
        generated_text="Respected Sir/Madam,",
        input_data={"name": "Asha"},
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )

    restored = GeneratedDoc.model_validate_json(doc.model_dump_json())

    assert restored == doc
    assert restored.is_transient


def test_profile_rejects_negative_credits() -> None:
    data = {"id": "u", "email": "a@example.com", "credits_remaining": -1}

    with pytest.raises(ValidationError):
        UserProfile.model_validate(data)
