"""
Single source of truth for constants used across the wizard.

All shared enumerations, defaults and label helpers live here to avoid
duplication between the generator, the renderers and the email layer.
"""

from typing import Dict, List, Optional, Tuple


# === PROFILE ENUMERATIONS ===

GOALS: List[str] = ['weight_loss', 'muscle_gain', 'toning', 'endurance']

FITNESS_LEVELS: List[str] = ['beginner', 'intermediate', 'advanced']

TIMELINES: List[str] = ['1_month', '3_months', '6_months']

# Timelines whose plan is cycle 1 of a longer program
SINGLE_CYCLE_TIMELINE: str = '1_month'
MULTI_CYCLE_TIMELINES: Tuple[str, ...] = ('3_months', '6_months')

DIETARY_PREFERENCES: List[str] = ['standard', 'vegetarian', 'vegan', 'keto', 'paleo']

EQUIPMENT_CATALOG: List[str] = [
    'Bodyweight Only',
    'Dumbbells',
    'Resistance Bands',
    'Kettlebells',
    'Pull-up Bar',
    'Gym Access',
]


# === MEAL LABELS ===
# Recognized section headers inside a day's meals text, in display order

MEAL_LABELS: List[str] = [
    'Breakfast',
    'Lunch',
    'Dinner',
    'Snacks',
    'Pre-Workout',
    'Post-Workout',
    'Brunch',
    'Supper',
]

# Key used when no meal label is recognized
FALLBACK_MEAL_KEY: str = 'Meals'


# === DISPLAY DEFAULTS ===

NOT_SPECIFIED: str = 'NOT SPECIFIED'
DEFAULT_EQUIPMENT_LABEL: str = 'Bodyweight Only'
DEFAULT_DISPLAY_NAME: str = 'Athlete'

DEFAULT_PLAN_TITLE: str = 'Fitness Plan'
DEFAULT_INTRODUCTION: str = 'Your personalized fitness journey starts here!'

DAY_DEFAULTS: Dict[str, str] = {
    'focus': 'General Fitness',
    'timing': 'Flexible timing',
    'workout': 'Rest day or active recovery',
    'meals': 'Balanced nutrition throughout the day',
}

APP_NAME: str = 'AI Fitness Wizard'
DOCUMENT_VERSION: str = 'v2.0'


# === LAYOUTS ===

LAYOUT_DESKTOP: str = 'desktop'
LAYOUT_MOBILE: str = 'mobile'
LAYOUTS: List[str] = [LAYOUT_DESKTOP, LAYOUT_MOBILE]

PLAN_FILENAMES: Dict[str, str] = {
    LAYOUT_DESKTOP: 'Your_4_Week_Plan.pdf',
    LAYOUT_MOBILE: 'Your_4_Week_Plan_Mobile.pdf',
}

BONUS_FILENAMES: Dict[str, str] = {
    '3_months': 'Bonus_3_Month_Roadmap.pdf',
    '6_months': 'Bonus_6_Month_Blueprint.pdf',
}


# === GENERATION LIMITS ===

DEGRADED_EXCERPT_MAX_CHARS: int = 500
MIN_BULLET_LENGTH: int = 4


# === VALIDATION BOUNDS ===

AGE_MIN: int = 13
AGE_MAX: int = 100

WEIGHT_MIN_KG: float = 30.0
WEIGHT_MAX_KG: float = 300.0

HEIGHT_MIN_CM: float = 100.0
HEIGHT_MAX_CM: float = 250.0

MAX_NAME_LENGTH: int = 100


# === LABEL HELPERS ===

def is_multi_cycle(timeline: Optional[str]) -> bool:
    """True when the timeline spans more than one 4-week cycle."""
    return timeline in MULTI_CYCLE_TIMELINES


def humanize(value: Optional[str]) -> str:
    """'weight_loss' -> 'WEIGHT LOSS'; empty -> NOT SPECIFIED."""
    if not value:
        return NOT_SPECIFIED
    return str(value).replace('_', ' ').upper()


def duration_text(timeline: Optional[str]) -> str:
    """Short plan-length label used in email subjects."""
    return {
        '1_month': '4-Week',
        '3_months': '3-Month',
        '6_months': '6-Month',
    }.get(timeline or '', 'Custom')
