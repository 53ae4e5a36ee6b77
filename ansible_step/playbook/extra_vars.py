"""
Extra variable normalization

Converts the raw extraVars mapping of a step into ExtraVariable entries.
Each value is either a plain scalar or a record:

    extraVars:
      count: 5
      api_token:
        value: s3cr3t
        hidden: true

Records must state both fields; secrecy is never defaulted.
"""

import logging
from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from ansible_step.playbook.exceptions import MalformedVariableError
from ansible_step.playbook.models import ExtraVariable

logger = logging.getLogger(__name__)

Scalar = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class ExtraVariableRecord(BaseModel):
    """Record form of an extra variable value"""

    model_config = ConfigDict(extra="forbid", frozen=True)

    value: Scalar
    hidden: StrictBool


def stringify(value: bool | int | float | str) -> str:
    """Render a scalar as the string value ansible receives"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _describe_errors(error: PydanticValidationError) -> str:
    """Summarize pydantic errors as 'field: message' pairs"""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "record"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def normalize_extra_var(key: Any, raw: Any) -> ExtraVariable:
    """
    Convert one raw entry

    Args:
        key: Variable name
        raw: Scalar or {value, hidden} mapping

    Returns:
        ExtraVariable

    Raises:
        MalformedVariableError: If the key or value has an unsupported shape
    """
    if not isinstance(key, str) or not key.strip():
        raise MalformedVariableError(key, "key must be a non-empty string")

    if isinstance(raw, Mapping):
        try:
            record = ExtraVariableRecord.model_validate(dict(raw))
        except PydanticValidationError as e:
            raise MalformedVariableError(key, _describe_errors(e)) from e
        return ExtraVariable(key=key, value=stringify(record.value), hidden=record.hidden)

    if isinstance(raw, (bool, int, float, str)):
        return ExtraVariable(key=key, value=stringify(raw), hidden=False)

    raise MalformedVariableError(
        key, f"unsupported value type {type(raw).__name__}, expected a scalar or a record"
    )


def normalize_extra_vars(raw: Mapping[str, Any] | None) -> list[ExtraVariable] | None:
    """
    Convert the raw extraVars mapping

    Args:
        raw: Mapping of variable names to scalars or records, or None

    Returns:
        One ExtraVariable per key in mapping order, or None when raw is None

    Raises:
        MalformedVariableError: On the first malformed entry; no partial list is returned
    """
    if raw is None:
        return None

    extra_vars = [normalize_extra_var(key, value) for key, value in raw.items()]

    hidden = sum(1 for var in extra_vars if var.hidden)
    logger.debug(f"Normalized {len(extra_vars)} extra variables ({hidden} hidden)")
    return extra_vars
