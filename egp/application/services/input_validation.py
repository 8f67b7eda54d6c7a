"""Input validation for governance requests.

validate_input() turns a raw JSON object into the typed input model for
its kind, or raises InputValidationError listing every problem found
with a dotted field path.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from egp.application.dtos.governance_inputs import (
    AdoptInput,
    GovernanceInput,
    ProposeInput,
    SenseInput,
)
from egp.domain.errors import FieldIssue, InputValidationError
from egp.domain.models import ObjectType

INPUT_MODELS: dict[ObjectType, type[BaseModel]] = {
    ObjectType.SENSE: SenseInput,
    ObjectType.PROPOSE: ProposeInput,
    ObjectType.ADOPT: AdoptInput,
}


def _issue_from_error(error: Mapping[str, Any]) -> FieldIssue:
    path = ".".join(str(part) for part in error.get("loc", ()))
    cause = error.get("ctx", {}).get("error") if error.get("type") == "value_error" else None
    message = str(cause) if cause is not None else str(error.get("msg", "invalid value"))
    return FieldIssue(path=path, message=message)


def validate_input(raw: Any, kind: ObjectType | str) -> GovernanceInput:
    """Validate raw input for a governance object kind.

    Args:
        raw: The decoded request body.
        kind: "sense", "propose" or "adopt".

    Returns:
        The matching SenseInput, ProposeInput or AdoptInput.

    Raises:
        InputValidationError: If the input is malformed or out of range.
        ValueError: If kind is not one of the three protocol kinds.
    """
    object_type = ObjectType(kind)
    model = INPUT_MODELS.get(object_type)
    if model is None:
        raise ValueError(f"no input model for {object_type.value!r}")

    if not isinstance(raw, Mapping):
        raise InputValidationError(
            object_type.value, [FieldIssue(path="", message="input must be a JSON object")]
        )

    try:
        return model.model_validate(dict(raw))  # type: ignore[return-value]
    except ValidationError as exc:
        issues = [_issue_from_error(error) for error in exc.errors()]
        raise InputValidationError(object_type.value, issues) from exc
