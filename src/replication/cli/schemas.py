"""
JSON schemas for CLI input files.

Documents are validated before they reach the inventory builders and the
diff engine, so malformed files fail with the offending path.
"""

from typing import Any

import jsonschema

from ..errors import ReplicationSchemaError
from ..inventory import MANIFEST_OBJECT_KEYS
from ..report import STATUSES

DESIRED_ITEMS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Desired OCF items",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["id", "type"],
        "properties": {
            "id": {"type": "string", "minLength": 1},
            "type": {"type": "string", "minLength": 1},
            "payload": {},
        },
    },
}

CONTRACT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Cap table contract",
    "type": "object",
    "properties": {
        "contractId": {"type": "string"},
        "contract_id": {"type": "string"},
        "payload": {"type": "object"},
        "contract": {
            "type": "object",
            "properties": {"payload": {"type": "object"}},
        },
    },
}

_MANIFEST_OBJECT = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "string", "minLength": 1}},
}

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Ledger OCF manifest",
    "type": "object",
    "properties": {
        "issuer": {"type": ["object", "null"]},
        **{
            key: {"type": ["array", "null"], "items": _MANIFEST_OBJECT}
            for key in MANIFEST_OBJECT_KEYS
        },
        "transactions": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "required": ["id", "object_type"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "object_type": {"type": "string"},
                },
            },
        },
    },
}

REPORT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Replication report",
    "type": "object",
    "required": [
        "status", "timestamp", "summary",
        "creates", "edits", "deletes", "conflicts",
    ],
    "properties": {
        "status": {"enum": list(STATUSES)},
        "timestamp": {"type": "string"},
        "summary": {"type": "string"},
        "contract_anchor": {"type": ["string", "null"]},
        "desired_items": {"type": ["integer", "null"], "minimum": 0},
        "ledger_entities": {"type": ["integer", "null"], "minimum": 0},
        "creates": {"type": "integer", "minimum": 0},
        "edits": {"type": "integer", "minimum": 0},
        "deletes": {"type": "integer", "minimum": 0},
        "conflicts": {"type": "integer", "minimum": 0},
        "breakdown": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["entity_type", "description"],
                "properties": {
                    "entity_type": {"type": "string"},
                    "description": {"type": "string"},
                },
            },
        },
        "operations": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "type", "operation"],
            },
        },
        "conflict_details": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "type", "secondary_key", "message"],
            },
        },
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
}


def validate_document(instance: Any, schema: dict[str, Any], name: str) -> None:
    """
    Validate a loaded JSON document

    Args:
        instance: Parsed JSON document
        schema: JSON schema to validate against
        name: Document name for error messages

    Raises:
        ReplicationSchemaError: If the document does not match the schema
    """
    try:
        jsonschema.validate(instance=instance, schema=schema)
    except jsonschema.exceptions.ValidationError as e:
        path = ".".join(str(part) for part in e.absolute_path)
        raise ReplicationSchemaError(
            f"Invalid {name}: {e.message}" + (f" (at {path})" if path else ""),
            field_path=path or None,
        ) from e
