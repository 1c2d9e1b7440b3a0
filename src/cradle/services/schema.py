from __future__ import annotations

import json
from pathlib import Path

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError as _InvalidSchema


class SchemaError(RuntimeError):
    pass


def load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SchemaError(f"Missing file: {path}") from e
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise SchemaError("\n".join(lines))


class SchemaService:
    def __init__(self, schema_dir: Path) -> None:
        self._schema_dir = schema_dir
        self._cache: dict[str, object] = {}

    def load(self, name: str) -> object:
        if name not in self._cache:
            schema = load_json(self._schema_dir / f"{name}.schema.json")
            try:
                Draft202012Validator.check_schema(schema)
            except _InvalidSchema as e:
                raise SchemaError(f"Invalid schema {name}: {e.message}") from e
            self._cache[name] = schema
        return self._cache[name]

    def validate(self, instance: object, name: str, *, context: str | None = None) -> None:
        validate_json(instance, self.load(name), context=context or name)
