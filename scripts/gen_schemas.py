# scripts/gen_schemas.py
"""
Generate JSON Schemas for Alchemist data models.

This script exports JSON Schema files for:
    - ClientRecord, WorkerRecord, TaskRecord
    - Config
    - ValidationReport

Output directory: schemas/
"""

import json
from pathlib import Path

from alchemist.schemas.models import (
    ClientRecord,
    Config,
    TaskRecord,
    ValidationReport,
    WorkerRecord,
)


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a given Pydantic model.

    @details
    Writes "<name>.schema.json" into out_dir (created if missing), UTF-8,
    indented, with a final newline.

    @params
        model_cls : Type[BaseModel]
            The Pydantic model class whose schema will be generated.
        name : str
            Base name of the output file (without extension).
        out_dir : Path
            Target directory where the schema file will be written.

    @returns
        Path of the written schema file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema()

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"✅  Generated {rel}")
    return schema_path


def main(out_dir: Path | None = None) -> None:
    """Writes schemas for the row records, the config and the report into `schemas/`."""
    out_dir = out_dir or Path("schemas").resolve()

    export_schema(ClientRecord, "client", out_dir)
    export_schema(WorkerRecord, "worker", out_dir)
    export_schema(TaskRecord, "task", out_dir)
    export_schema(Config, "config", out_dir)
    export_schema(ValidationReport, "validation_report", out_dir)


if __name__ == "__main__":
    main()
