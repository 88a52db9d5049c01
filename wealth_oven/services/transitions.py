"""
Status transition helper shared by the entity services
"""
from enum import Enum
from typing import Dict, Set, Type

from wealth_oven.models import utcnow
from wealth_oven.services.errors import InvalidTransitionError, ValidationError


def parse_status(status_enum: Type[Enum], value) -> Enum:
    """Coerce a raw value into `status_enum`"""
    try:
        return status_enum(value)
    except ValueError:
        allowed = ", ".join(member.value for member in status_enum)
        raise ValidationError(f"Unknown status '{value}' (expected one of: {allowed})")


def apply_transition(
    entity,
    new_status,
    transitions: Dict[Enum, Set[Enum]],
    status_enum: Type[Enum],
    field: str = "status",
) -> bool:
    """
    Move `entity` to `new_status` if the transition table allows it

    Returns False (and leaves the row untouched) when the entity already
    has that status.

    Raises:
        ValidationError: unknown status value
        InvalidTransitionError: transition not in the table
    """
    target = parse_status(status_enum, new_status)
    current = status_enum(getattr(entity, field))

    if current == target:
        return False

    if target not in transitions[current]:
        raise InvalidTransitionError(
            f"Cannot change status from '{current.value}' to '{target.value}'"
        )

    setattr(entity, field, target)
    entity.updated_at = utcnow()
    return True
