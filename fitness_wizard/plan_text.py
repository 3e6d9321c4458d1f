"""Plain-text rendering of a plan, for email bodies and the JSON response."""

from typing import List

from .constants import DEFAULT_INTRODUCTION, DEFAULT_PLAN_TITLE, SINGLE_CYCLE_TIMELINE, humanize
from .models import PlanDocument
from .text_parsing import parse_meals, parse_workout


def format_plan_text(plan: PlanDocument, timeline: str = '') -> str:
    lines: List[str] = [plan.title or DEFAULT_PLAN_TITLE, '', plan.introduction or DEFAULT_INTRODUCTION, '']

    if not plan.weeks:
        lines.append('Your personalized plan is being prepared. Please try generating again.')

    for week in plan.weeks:
        lines.append(week.week_title)
        lines.append('=' * len(week.week_title))
        for day in week.days:
            lines.append(f"  {day.day_title}: {day.focus}")
            lines.append(f"  Timing: {day.timing}")
            lines.append('  Workout:')
            for exercise in parse_workout(day.workout):
                lines.append(f"    - {exercise}")
            lines.append('  Nutrition:')
            for label, items in parse_meals(day.meals).items():
                lines.append(f"    {label}: {'; '.join(items)}")
            lines.append('')

    if plan.progression_notes and timeline != SINGLE_CYCLE_TIMELINE:
        lines.append(f"Progression Plan for Your {humanize(timeline)} Journey")
        lines.append(plan.progression_notes)

    return '\n'.join(lines).rstrip() + '\n'
