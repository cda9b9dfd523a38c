# contract_analyzer/services/schema.py
from typing import Any, Dict, List

# Field list handed to the extraction call. Names and descriptions steer the
# model; changing them changes what the service extracts.
CONTRACT_SUGGESTIONS_SCHEMA: List[Dict[str, Any]] = [
    {
        "name": "contractSuggestions",
        "type": "array",
        "description": "An array of clause suggestions extracted from the contract document.",
        "children": [
            {
                "name": "type",
                "type": "string",
                "description": "This field indicates the level of attention the clause requires. high suggests critical examination, medium is a caution, and low might offer a beneficial negotiation point or a general advantage."
            },
            {
                "name": "title",
                "type": "string",
                "description": "A concise label for easy identification of the clause and its implications."
            },
            {
                "name": "description",
                "type": "string",
                "description": "This field is for the contextual reasoning for the assigned type, detailing potential risks, disadvantages, or advantages and what should be done or avoided."
            },
            {
                "name": "exactClause",
                "type": "string",
                "description": "This field is for the exact text of the clause, ensuring fidelity to the source document and accuracy in evaluation."
            }
        ]
    }
]

SCALAR_TYPES = ("string", "number", "boolean")
NESTED_TYPES = ("array", "object")
FIELD_TYPES = SCALAR_TYPES + NESTED_TYPES + ("enum",)


class SchemaError(ValueError):
    """Raised when an extraction schema is malformed."""


def validate_schema(fields: List[Dict[str, Any]], *, path: str = "") -> None:
    """
    Check a field list before it is sent to the model.
    Every level needs unique names, a known type, children for array/object
    and values for enum.
    """
    if not isinstance(fields, list) or not fields:
        raise SchemaError(f"schema{' at ' + path if path else ''} must be a non-empty list of fields")

    seen = set()
    for f in fields:
        if not isinstance(f, dict):
            raise SchemaError(f"field at {path or '<root>'} must be an object")
        name = f.get("name")
        if not isinstance(name, str) or not name.strip():
            raise SchemaError(f"field at {path or '<root>'} is missing a name")
        where = f"{path}.{name}" if path else name
        if name in seen:
            raise SchemaError(f"duplicate field name: {where}")
        seen.add(name)

        ftype = f.get("type")
        if ftype not in FIELD_TYPES:
            raise SchemaError(f"unsupported type {ftype!r} for field {where}")
        if ftype in NESTED_TYPES:
            validate_schema(f.get("children"), path=where)
        if ftype == "enum":
            values = f.get("values")
            if not isinstance(values, list) or not values:
                raise SchemaError(f"enum field {where} needs a non-empty 'values' list")


def _field_to_json_schema(f: Dict[str, Any]) -> Dict[str, Any]:
    ftype = f["type"]
    if ftype in SCALAR_TYPES:
        out: Dict[str, Any] = {"type": ftype}
    elif ftype == "enum":
        out = {"type": "string", "enum": [str(v) for v in f["values"]]}
    elif ftype == "object":
        out = _object_schema(f["children"])
    else:  # array
        out = {"type": "array", "items": _object_schema(f["children"])}
    if f.get("description"):
        out["description"] = f["description"]
    return out


def _object_schema(fields: List[Dict[str, Any]]) -> Dict[str, Any]:
    # strict mode: every property listed as required, nothing extra allowed
    return {
        "type": "object",
        "additionalProperties": False,
        "required": [f["name"] for f in fields],
        "properties": {f["name"]: _field_to_json_schema(f) for f in fields},
    }


def to_json_schema(fields: List[Dict[str, Any]], *, name: str = "document_extraction") -> Dict[str, Any]:
    """Convert a field list into the `json_schema` block of an OpenAI response_format."""
    validate_schema(fields)
    return {
        "name": name,
        "strict": True,
        "schema": _object_schema(fields),
    }
