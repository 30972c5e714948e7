# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Shared pieces for the per-feature pydantic schemas.

* ``CamelModel``   – snake_case attributes, camelCase on the wire.
* ``parse_payload`` – validate a raw dict (multipart forms, partial
  updates) into a tagged ``ValidationResult`` instead of raising.
* ``check_email``  – shared email shape check for request models.
* ``parse_id``     – path ids must be positive integers.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


T = TypeVar("T", bound=BaseModel)


@dataclass
class ValidationResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    errors: list[dict[str, Any]] = field(default_factory=list)


def parse_payload(schema: type[T], data: Any) -> ValidationResult[T]:
    try:
        return ValidationResult(ok=True, value=schema.model_validate(data))
    except ValidationError as exc:
        return ValidationResult(
            ok=False,
            errors=exc.errors(include_url=False, include_context=False, include_input=False),
        )


def check_email(value: Optional[str]) -> Optional[str]:
    """Light shape check: one "@", a local part and a dotted domain."""
    if value is None:
        return value
    value = value.strip()
    local, sep, domain = value.partition("@")
    if not sep or not local or "." not in domain:
        raise ValueError("Invalid email address")
    return value


def parse_id(raw: str, entity: str) -> int:
    """Return *raw* as a positive int or raise 400 ``Invalid <entity> ID``."""
    try:
        value = int(raw, 10)
    except ValueError:
        value = 0
    if value <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {entity} ID",
        )
    return value
