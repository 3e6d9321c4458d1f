"""
Request-scoped data model: the submitted profile, the generated plan, and
what the delivery step hands back.

Attributes are snake_case; the wire format (wizard JSON, LLM JSON, API
responses) is camelCase and goes through from_dict()/to_dict().
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import (
    AGE_MAX,
    AGE_MIN,
    DAY_DEFAULTS,
    HEIGHT_MAX_CM,
    HEIGHT_MIN_CM,
    WEIGHT_MAX_KG,
    WEIGHT_MIN_KG,
    is_multi_cycle,
)


# =============================================================================
# COERCION HELPERS
# =============================================================================

def safe_int(val, minimum: int = 0, maximum: int = 100000) -> Optional[int]:
    """Safely convert to int with bounds checking."""
    try:
        if val is None or val == '':
            return None
        result = int(float(val))
        if result < minimum or result > maximum:
            return None
        return result
    except (ValueError, TypeError):
        return None


def safe_float(val, minimum: float = 0, maximum: float = 100000) -> Optional[float]:
    """Safely convert to float with bounds checking."""
    try:
        if val is None or val == '':
            return None
        result = float(val)
        if result < minimum or result > maximum:
            return None
        return result
    except (ValueError, TypeError):
        return None


def to_text(value: Any) -> str:
    """
    Coerce an LLM-provided value to a display string.

    Lists are joined with semicolons and dicts flattened to "Key: value"
    pairs, which keeps them parseable by the bullet and meal parsers.
    """
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return '; '.join(f"{k}: {to_text(v)}" for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return '; '.join(to_text(v) for v in value if v is not None)
    return str(value)


def _text_or_default(value: Any, default: str) -> str:
    text = to_text(value).strip()
    return text or default


# =============================================================================
# USER PROFILE
# =============================================================================

# Wire keys mapped to attributes; anything else lands in extras
_PROFILE_FIELDS = {
    'name': 'name',
    'email': 'email',
    'age': 'age',
    'gender': 'gender',
    'weight': 'weight',
    'height': 'height',
    'goal': 'goal',
    'fitnessLevel': 'fitness_level',
    'timeline': 'timeline',
    'dietaryPreference': 'dietary_preference',
    'foodAllergies': 'food_allergies',
    'equipment': 'equipment',
}


@dataclass
class UserProfile:
    """A wizard submission (minus the delivery preferences)."""
    name: str = ''
    email: str = ''
    age: Optional[int] = None
    gender: str = ''
    weight: Optional[float] = None
    height: Optional[float] = None
    goal: str = ''
    fitness_level: str = ''
    timeline: str = ''
    dietary_preference: str = ''
    food_allergies: str = ''
    equipment: List[str] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        data = data or {}
        equipment = data.get('equipment') or []
        if isinstance(equipment, str):
            equipment = [item.strip() for item in equipment.split(',') if item.strip()]
        elif not isinstance(equipment, (list, tuple)):
            equipment = []

        extras = {
            k: v for k, v in data.items()
            if k not in _PROFILE_FIELDS and k not in ('want', 'formData')
        }

        return cls(
            name=str(data.get('name') or '').strip(),
            email=str(data.get('email') or '').strip().lower(),
            age=safe_int(data.get('age'), AGE_MIN, AGE_MAX),
            gender=str(data.get('gender') or ''),
            weight=safe_float(data.get('weight'), WEIGHT_MIN_KG, WEIGHT_MAX_KG),
            height=safe_float(data.get('height'), HEIGHT_MIN_CM, HEIGHT_MAX_CM),
            goal=str(data.get('goal') or ''),
            fitness_level=str(data.get('fitnessLevel') or ''),
            timeline=str(data.get('timeline') or ''),
            dietary_preference=str(data.get('dietaryPreference') or ''),
            food_allergies=str(data.get('foodAllergies') or ''),
            equipment=[str(item) for item in equipment if item],
            extras=extras,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {wire: getattr(self, attr) for wire, attr in _PROFILE_FIELDS.items()}
        out.update(self.extras)
        return out

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else self.name

    @property
    def is_multi_cycle(self) -> bool:
        return is_multi_cycle(self.timeline)

    @property
    def bmi(self) -> Optional[float]:
        """Body-mass index from weight (kg) and height (cm)."""
        if not self.weight or not self.height:
            return None
        meters = self.height / 100
        return round(self.weight / (meters * meters), 1)

    @property
    def bmi_category(self) -> Optional[str]:
        bmi = self.bmi
        if bmi is None:
            return None
        if bmi < 18.5:
            return 'Underweight'
        if bmi < 25:
            return 'Healthy'
        if bmi < 30:
            return 'Overweight'
        return 'Obese'


# =============================================================================
# PLAN DOCUMENT
# =============================================================================

@dataclass
class DayEntry:
    day_title: str
    focus: str = DAY_DEFAULTS['focus']
    timing: str = DAY_DEFAULTS['timing']
    workout: str = DAY_DEFAULTS['workout']
    meals: str = DAY_DEFAULTS['meals']

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> 'DayEntry':
        if not isinstance(data, dict):
            data = {'workout': data} if data else {}
        return cls(
            day_title=_text_or_default(data.get('dayTitle'), f"Day {index + 1}"),
            focus=_text_or_default(data.get('focus'), DAY_DEFAULTS['focus']),
            timing=_text_or_default(data.get('timing'), DAY_DEFAULTS['timing']),
            workout=_text_or_default(data.get('workout'), DAY_DEFAULTS['workout']),
            meals=_text_or_default(data.get('meals'), DAY_DEFAULTS['meals']),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            'dayTitle': self.day_title,
            'focus': self.focus,
            'timing': self.timing,
            'workout': self.workout,
            'meals': self.meals,
        }


@dataclass
class WeekEntry:
    week_title: str
    days: List[DayEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> 'WeekEntry':
        if not isinstance(data, dict):
            data = {}
        raw_days = data.get('days')
        if not isinstance(raw_days, list):
            raw_days = []
        return cls(
            week_title=_text_or_default(data.get('weekTitle'), f"Week {index + 1}"),
            days=[DayEntry.from_dict(day, i) for i, day in enumerate(raw_days)],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weekTitle': self.week_title,
            'days': [day.to_dict() for day in self.days],
        }


@dataclass
class PlanDocument:
    title: str
    introduction: str
    weeks: List[WeekEntry] = field(default_factory=list)
    progression_notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlanDocument':
        """Build a plan from parsed LLM JSON, tolerating missing or mistyped keys."""
        data = data if isinstance(data, dict) else {}
        raw_weeks = data.get('weeks')
        if not isinstance(raw_weeks, list):
            raw_weeks = []

        notes = to_text(data.get('progressionNotes')).strip() or None

        return cls(
            title=to_text(data.get('title')).strip(),
            introduction=to_text(data.get('introduction')).strip(),
            weeks=[WeekEntry.from_dict(week, i) for i, week in enumerate(raw_weeks)],
            progression_notes=notes,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'title': self.title,
            'introduction': self.introduction,
            'weeks': [week.to_dict() for week in self.weeks],
        }
        if self.progression_notes:
            out['progressionNotes'] = self.progression_notes
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


# =============================================================================
# DELIVERY
# =============================================================================

@dataclass
class DeliveryOptions:
    """The wizard's `want` object."""
    pdf: bool = True
    email: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'DeliveryOptions':
        if not isinstance(data, dict):
            return cls()
        return cls(pdf=bool(data.get('pdf', True)), email=bool(data.get('email', False)))

    def to_dict(self) -> Dict[str, bool]:
        return {'pdf': self.pdf, 'email': self.email}


@dataclass
class RenderedDocument:
    filename: str
    content: bytes
    layout: str = 'desktop'
    mime_type: str = 'application/pdf'

    def base64(self) -> str:
        return base64.b64encode(self.content).decode('ascii')

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64()}"


@dataclass
class DeliveryResult:
    pdf_url: Optional[str] = None
    mobile_pdf_url: Optional[str] = None
    email_sent: bool = False
    email_error: Optional[str] = None
    is_bonus_eligible: bool = False
    bonus_status: str = 'not_triggered'

    def to_response(self) -> Dict[str, Any]:
        """Response fields; optional ones are omitted when unset."""
        out: Dict[str, Any] = {
            'isBonusEligible': self.is_bonus_eligible,
            'bonusStatus': self.bonus_status,
            'emailSent': self.email_sent,
        }
        if self.pdf_url:
            out['pdfUrl'] = self.pdf_url
        if self.mobile_pdf_url:
            out['mobilePdfUrl'] = self.mobile_pdf_url
        if self.email_error:
            out['emailError'] = self.email_error
        return out
