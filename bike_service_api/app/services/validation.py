"""
Validation helpers shared by the bike and component services.
"""

from typing import TypeVar, Union
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import InvalidIdentifierError, ValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_record(record: ModelT) -> ModelT:
    """Re‑run the model's field rules on ``record``.

    Records can be built with ``model_construct`` or mutated after
    construction, both of which skip validation, so services check
    again before writing.  Returns a freshly validated copy.
    """
    try:
        return type(record).model_validate(record.model_dump())
    except PydanticValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"validation error: {problems}") from exc


def parse_identifier(value: Union[str, UUID], kind: str) -> UUID:
    """Parse a UUID string, raising ``InvalidIdentifierError`` on bad input."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidIdentifierError(f"invalid {kind} ID: {value!r}") from exc
