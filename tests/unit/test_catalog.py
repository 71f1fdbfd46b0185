"""Unit tests for the template catalog."""

import pytest

from backend.app.catalog import get_template, list_templates, template_for_type
from backend.app.models.common import DocType


def test_catalog_order_and_ids() -> None:
    """Test templates are listed in catalog order."""
    assert [t.id for t in list_templates()] == [
        "resignation",
        "bank",
        "police",
        "college",
        "apology",
        "leave",
    ]


def test_every_doc_type_has_one_template() -> None:
    """Test each DocType maps back to exactly one template."""
    types = [t.type for t in list_templates()]
    assert sorted(types, key=lambda t: t.name) == sorted(DocType, key=lambda t: t.name)


def test_leave_template_fields() -> None:
    """Test the leave template declares its fields in order, all required."""
    leave = get_template("leave")

    assert leave.type == DocType.LEAVE_LETTER
    assert [f.name for f in leave.fields] == ["name", "type", "startDate", "endDate", "reason"]
    assert all(f.required for f in leave.fields)
    assert [f.type for f in leave.fields][2:4] == ["date", "date"]


def test_optional_fields_are_not_required() -> None:
    """Test templates with optional fields report only the required ones."""
    resignation = get_template("resignation")

    required = [f.name for f in resignation.required_fields()]
    assert "reason" not in required
    assert required == ["name", "company", "title", "lastDay"]


def test_get_template_unknown_id() -> None:
    """Test unknown ids raise KeyError."""
    with pytest.raises(KeyError):
        get_template("visa")


def test_template_for_type() -> None:
    """Test reverse lookup by document type."""
    config = template_for_type(DocType.BANK_COMPLAINT)

    assert config is not None
    assert config.id == "bank"
