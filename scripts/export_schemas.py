"""Export JSON schemas for the template catalog and stored records."""

import json
from pathlib import Path

from pydantic import BaseModel

from backend.app.models import DocConfig, GeneratedDoc, UsageLogEntry, UserProfile

SCHEMA_MODELS: dict[str, type[BaseModel]] = {
    "DocConfig": DocConfig,
    "GeneratedDoc": GeneratedDoc,
    "UserProfile": UserProfile,
    "UsageLogEntry": UsageLogEntry,
}


def main(schemas_dir: Path = Path("docs/schemas")) -> list[Path]:
    """Export schemas to docs/schemas/."""
    schemas_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, model in SCHEMA_MODELS.items():
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {name} schema to {path}")
        written.append(path)

    return written


if __name__ == "__main__":
    main()
