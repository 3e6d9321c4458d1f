"""
Plan generation: profile in, PlanDocument out.

Builds the trainer prompt, makes exactly one chat-completion call to an
OpenAI-compatible provider, and parses the JSON answer. A response that
is not a JSON object is never surfaced as an error; a single-week
degraded plan carrying an excerpt of the raw answer is returned instead.
"""

import json
import re
from typing import Any, Dict, Optional

import openai

from .config_loader import LLMSettings
from .constants import DEGRADED_EXCERPT_MAX_CHARS, SINGLE_CYCLE_TIMELINE
from .errors import UpstreamError, UpstreamParseError
from .logger import get_logger
from .models import DayEntry, PlanDocument, UserProfile, WeekEntry

log = get_logger('fitness_wizard.plan_generator')


# =============================================================================
# PROMPT
# =============================================================================

WEEK_TITLE_PATTERNS = {
    'beginner': ['Week 1: Foundation', 'Week 2: Form Building',
                 'Week 3: Strength Introduction', 'Week 4: Consistency'],
    'intermediate': ['Week 1: Build Strength', 'Week 2: Progressive Load',
                     'Week 3: Intensity Increase', 'Week 4: Power Week'],
    'advanced': ['Week 1: Peak Performance', 'Week 2: Intensity Push',
                 'Week 3: Maximum Load', 'Week 4: Elite Challenge'],
}

EXAMPLE_DAY = {
    'dayTitle': 'Day 1',
    'focus': 'Upper Body Strength',
    'timing': 'Wake: 7am, Workout: 8am, Meals: 12pm/3pm/7pm',
    'workout': ('Push-ups: 3 sets of 12 reps; Dumbbell Bench Press: 4 sets of 8-10 reps; '
                'Overhead Press: 3 sets of 10 reps; Plank: 3 sets of 45 seconds'),
    'meals': ('Breakfast: Oatmeal with banana and almonds (400 cal); '
              'Lunch: Grilled chicken with quinoa and vegetables (550 cal); '
              'Dinner: Salmon with sweet potato and broccoli (600 cal); '
              'Snacks: Greek yogurt, protein shake'),
}


def _equipment_text(profile: UserProfile) -> str:
    return ', '.join(profile.equipment) if profile.equipment else 'bodyweight'


def _week_title_rules() -> str:
    lines = []
    for level, titles in WEEK_TITLE_PATTERNS.items():
        quoted = ', '.join(f'"{t}"' for t in titles)
        lines.append(f"  * {level.title()} level: {quoted}")
    return '\n'.join(lines)


def build_system_prompt(profile: UserProfile) -> str:
    """Trainer instructions and output format rules. Deterministic for a given profile."""
    single_cycle = profile.timeline == SINGLE_CYCLE_TIMELINE

    if single_cycle:
        cycle_rule = ('- Timeline is "1_month": this is the COMPLETE plan. '
                      'Do NOT include a "progressionNotes" field.')
    else:
        cycle_rule = ('- Timeline is "3_months" or "6_months": this is Cycle 1 of a multi-cycle program. '
                      'You MUST include a "progressionNotes" field explaining how to progress '
                      'in the next 4-week cycle (weight increases, rep additions, rest reductions, '
                      'exercise progressions).')

    example = {
        'title': 'Your Custom 4-Week Cycle',
        'introduction': 'Motivational 2-3 sentence intro using their name and goal',
        'weeks': [{'weekTitle': 'Week 1: ...', 'days': [EXAMPLE_DAY, '... 7 days ...']},
                  '... 4 weeks ...'],
    }
    if not single_cycle:
        example['progressionNotes'] = ('Weeks 5-8: Increase compound lifts by 5-10%; '
                                       'Add 1-2 reps per set; Reduce rest by 10-15 seconds')

    return f"""You are a world-class personal trainer with 15+ years experience coaching beginners to elite athletes.

Create a highly detailed, personalized 4-week training + nutrition cycle based on the user's exact:
- Goal: {profile.goal or 'general fitness'}
- Fitness level: {profile.fitness_level or 'beginner'} (use this exactly, never assume beginner)
- Timeline: {profile.timeline or SINGLE_CYCLE_TIMELINE}
- Equipment: {_equipment_text(profile)}
- Diet preference: {profile.dietary_preference or 'standard'}

RULES:
{cycle_rule}
- Use level-specific week titles that reflect progressive difficulty:
{_week_title_rules()}

Return a single VALID JSON object only (no extra text, no markdown), shaped like:
{json.dumps(example, indent=2)}

CRITICAL FORMATTING INSTRUCTIONS:
- Every week MUST have 7 days (Day 1-7) with complete details
- "workout": separate exercises with semicolons, e.g. "Exercise Name: Sets x Reps; Next Exercise: Sets x Reps"
- "meals": use "Breakfast: food (calories); Lunch: food (calories); Dinner: food (calories); Snacks: items"
- All values (dayTitle, focus, timing, workout, meals) MUST be STRINGS, never objects or arrays
- Be detailed but stay under the token limit; do NOT truncate the JSON
- Use an encouraging but realistic tone"""


def build_user_message(profile: UserProfile) -> str:
    return f"Create a fitness plan for:\n{json.dumps(profile.to_dict(), indent=2)}"


# =============================================================================
# RESPONSE PARSING
# =============================================================================

_CODE_FENCE_OPEN = re.compile(r'^```(?:json)?\s*', re.IGNORECASE)
_CODE_FENCE_CLOSE = re.compile(r'\s*```$')


def parse_plan_response(content: str) -> Dict[str, Any]:
    """Parse the provider's text as a JSON object. Raises UpstreamParseError."""
    text = (content or '').strip()
    text = _CODE_FENCE_CLOSE.sub('', _CODE_FENCE_OPEN.sub('', text))

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise UpstreamParseError(f"Invalid JSON from provider: {e}", raw_content=content) from e

    if not isinstance(data, dict):
        raise UpstreamParseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_content=content
        )

    return data


def excerpt(text: str, limit: int = DEGRADED_EXCERPT_MAX_CHARS) -> str:
    """Truncate to at most `limit` characters, ellipsis included."""
    text = text or ''
    if len(text) <= limit:
        return text
    return text[:limit - 3] + '...'


def degraded_plan(raw_content: str) -> PlanDocument:
    """Single-week stand-in used when the provider's answer can't be parsed."""
    return PlanDocument(
        title='Your Custom Fitness Plan',
        introduction=('Your personalized fitness and nutrition plan has been generated. '
                      'Due to formatting, some details may be simplified.'),
        weeks=[
            WeekEntry(
                week_title='Week 1-4: Complete Plan',
                days=[
                    DayEntry(
                        day_title='Overview',
                        focus='Full Program',
                        timing='Flexible schedule',
                        workout=excerpt(raw_content) or 'See full plan details',
                        meals='See full plan details',
                    )
                ],
            )
        ],
    )


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class PlanGenerator:
    """Generates a PlanDocument with one call to the language model."""

    def __init__(self, settings: LLMSettings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client

    @property
    def client(self):
        """The chat client; built on first use so a missing key only fails requests."""
        if self._client is None:
            if not self.settings.is_configured:
                raise UpstreamError("Language model API key is not configured (OPENAI_API_KEY)")
            self._client = openai.OpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                default_headers=self.settings.headers or None,
                timeout=self.settings.timeout,
                max_retries=0,
            )
        return self._client

    def request_params(self, profile: UserProfile) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'model': self.settings.model,
            'messages': [
                {'role': 'system', 'content': build_system_prompt(profile)},
                {'role': 'user', 'content': build_user_message(profile)},
            ],
            'temperature': self.settings.temperature,
            'max_tokens': self.settings.max_tokens,
        }
        if self.settings.json_mode:
            params['response_format'] = {'type': 'json_object'}
        return params

    def complete(self, profile: UserProfile) -> str:
        """Make the single upstream call and return the raw message text."""
        params = self.request_params(profile)
        log.info("Requesting plan", model=params['model'], goal=profile.goal,
                 fitness_level=profile.fitness_level, timeline=profile.timeline)

        try:
            completion = self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            log.error(f"Language model request failed: {e}")
            raise UpstreamError(f"Language model request failed: {e}") from e

        choices = getattr(completion, 'choices', None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise UpstreamError("No response from language model")
        return content

    def generate_plan(self, profile: UserProfile) -> PlanDocument:
        content = self.complete(profile)

        try:
            data = parse_plan_response(content)
        except UpstreamParseError as e:
            log.warning(f"Falling back to degraded plan: {e}", chars=len(content))
            return degraded_plan(e.raw_content)

        plan = PlanDocument.from_dict(data)
        log.success("Plan parsed", weeks=len(plan.weeks),
                    has_progression=bool(plan.progression_notes))
        if not plan.weeks:
            log.warning("Plan has no weeks", keys=sorted(data.keys()))
        return plan

