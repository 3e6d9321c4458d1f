"""
Pre-generation validation for wizard submissions.

Validates the profile BEFORE the language model is called so a bad
submission fails fast with an actionable message and costs nothing.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .constants import (
    DIETARY_PREFERENCES,
    EQUIPMENT_CATALOG,
    FITNESS_LEVELS,
    GOALS,
    MAX_NAME_LENGTH,
    TIMELINES,
)
from .errors import ValidationError
from .models import UserProfile


@dataclass
class ValidationResult:
    """Result of validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, msg: str):
        self.errors.append(msg)
        self.is_valid = False

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    @property
    def message(self) -> str:
        return '; '.join(self.errors)


def is_plausible_email(email: str) -> bool:
    """Loose email check: something@something.tld, no spaces."""
    if not email or ' ' in email or email.count('@') != 1:
        return False
    local, domain = email.split('@')
    return bool(local) and '.' in domain and not domain.startswith('.') and not domain.endswith('.')


def validate_profile(profile: UserProfile, raw: Dict[str, Any] = None) -> ValidationResult:
    """
    Validate a submitted profile.

    Name and email are hard requirements. Unknown enum values, equipment
    outside the catalog and discarded numeric values only produce warnings:
    the plan can still be generated from free text.
    """
    result = ValidationResult(is_valid=True)
    raw = raw or {}

    if not profile.name or not profile.email:
        result.add_error("Name and email are required")
        return result

    if len(profile.name) > MAX_NAME_LENGTH:
        result.add_error(f"Name is longer than {MAX_NAME_LENGTH} characters")

    if not is_plausible_email(profile.email):
        result.add_error(f"Invalid email format: {profile.email}")

    enum_checks = (
        ('goal', profile.goal, GOALS),
        ('fitnessLevel', profile.fitness_level, FITNESS_LEVELS),
        ('timeline', profile.timeline, TIMELINES),
        ('dietaryPreference', profile.dietary_preference, DIETARY_PREFERENCES),
    )
    for field_name, value, allowed in enum_checks:
        if value and value not in allowed:
            result.add_warning(f"Unrecognized {field_name}: '{value}'")

    unknown_equipment = [item for item in profile.equipment if item not in EQUIPMENT_CATALOG]
    if unknown_equipment:
        result.add_warning(f"Equipment outside catalog: {', '.join(unknown_equipment)}")

    # Numbers the form sent but the model rejected as out of range
    for field_name in ('age', 'weight', 'height'):
        if raw.get(field_name) not in (None, '') and getattr(profile, field_name) is None:
            result.add_warning(f"Ignored invalid {field_name}: '{raw.get(field_name)}'")

    return result


def require_valid_profile(profile: UserProfile, raw: Dict[str, Any] = None) -> ValidationResult:
    """Validate and raise ValidationError on the first blocking problem."""
    result = validate_profile(profile, raw)
    if not result.is_valid:
        raise ValidationError(result.message)
    return result
