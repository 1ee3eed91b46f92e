from typing import Any, Dict

from pydantic import ValidationError

from planora.core.errors import PreferenceValidationError
from planora.models.domain import FIELD_LABELS, Prefs

BODY_FIELD = "body"


def _wire_name(field_name: str) -> str:
    field = Prefs.model_fields.get(field_name)
    if field is not None and field.alias:
        return field.alias
    return field_name


def _field_errors(exc: ValidationError) -> Dict[str, str]:
    """Collapse pydantic errors into one message per wire field name."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or (BODY_FIELD,)
        raw_name = str(loc[0])
        field_name = next(
            (
                name
                for name, field in Prefs.model_fields.items()
                if raw_name in (name, field.alias)
            ),
            raw_name,
        )
        key = _wire_name(field_name)
        if key in errors:
            continue
        if error["type"] == "missing":
            label = FIELD_LABELS.get(field_name, field_name)
            errors[key] = f"{label} is required"
        else:
            errors[key] = error["msg"]
    return errors


def validate_preferences(raw: Any) -> Prefs:
    """
    Validate an untrusted trip request and return canonical Prefs.
    Raises PreferenceValidationError with a field-keyed message map.
    """
    if isinstance(raw, Prefs):
        return raw
    if not isinstance(raw, dict):
        raise PreferenceValidationError(
            {BODY_FIELD: "Request body must be a JSON object"}
        )
    try:
        return Prefs.model_validate(raw)
    except ValidationError as e:
        raise PreferenceValidationError(_field_errors(e)) from e
