"""Template catalog models."""

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import DocType, FieldType


class FormField(BaseModel):
    """Single input field of a template form."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    type: FieldType = "text"
    placeholder: str | None = None
    required: bool = False


class DocConfig(BaseModel):
    """Template definition: display metadata plus ordered form fields."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: DocType
    title: str
    description: str
    icon: str = ""
    fields: tuple[FormField, ...] = Field(default_factory=tuple)

    def required_fields(self) -> list[FormField]:
        """Fields that must be filled before generation."""
        return [f for f in self.fields if f.required]
