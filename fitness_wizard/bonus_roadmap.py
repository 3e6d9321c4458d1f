"""
Bonus roadmap PDF for multi-cycle timelines (3 or 6 months).

A one-page companion to the 4-week plan: monthly milestones, how to
progress past the first cycle, and tracking tips.
"""

from datetime import date
from typing import List, Optional, Tuple

from .constants import APP_NAME, BONUS_FILENAMES, DEFAULT_DISPLAY_NAME, is_multi_cycle
from .errors import RenderError
from .logger import get_logger
from .models import RenderedDocument, UserProfile
from .pdf_generator import esc, html_to_pdf

log = get_logger('fitness_wizard.bonus_roadmap')

QUOTE = 'Success is the sum of small efforts repeated day in and day out.'
QUOTE_AUTHOR = 'Robert Collier'

# (label, description); the first month is always shown as complete
MILESTONES = {
    '3_months': [
        ('Month 1', 'Foundation & Form'),
        ('Month 2', 'Building Strength'),
        ('Month 3', 'Peak Performance'),
    ],
    '6_months': [
        ('Month 1', 'Foundation & Form'),
        ('Month 2', 'Building Strength'),
        ('Month 3', 'Increasing Intensity'),
        ('Month 4', 'Advanced Techniques'),
        ('Month 5', 'Peak Performance'),
        ('Month 6', 'Consolidation & Celebration'),
    ],
}

PHASES = [
    'Weeks 1-4: Follow your current AI-generated cycle',
    'Weeks 5-8: Increase weights 5-10%, add 1-2 reps per set, reduce rest by 15s',
    'Weeks 9-12: Add supersets/drop sets, introduce advanced variations',
]

SIX_MONTH_PHASES = [
    'Months 4-5: Strength & endurance focus with higher volume and new blocks',
    'Month 6: Peak phase + deload, then celebrate your progress!',
]

TRACKING_TIPS = [
    'Take progress photos every 4 weeks',
    'Log workouts & measurements weekly',
    "Celebrate small victories: you're building something incredible",
]

BONUS_CSS = """
@page { size: A4; margin: 16mm; }
body { font-family: 'Helvetica Neue', Helvetica, Arial, sans-serif; font-size: 10.5pt; color: #374151; line-height: 1.5; }
.cover { background: #7c3aed; color: #fff; padding: 20px; border-radius: 8px; text-align: center; margin-bottom: 16px; }
.cover h1 { margin: 0; font-size: 24pt; }
.cover .name { font-size: 14pt; margin-top: 4px; }
.cover .subtitle { color: #ede9fe; font-size: 10pt; margin-top: 4px; }
.quote { background: #f5f3ff; border-left: 4px solid #7c3aed; padding: 10px 14px; font-style: italic; margin-bottom: 14px; }
.quote .author { font-style: normal; text-align: right; color: #6b7280; font-size: 9pt; }
h2 { color: #5b21b6; font-size: 13pt; margin: 14px 0 6px 0; }
.milestone { display: flex; align-items: center; margin: 4px 0; }
.bar { width: 120px; height: 8px; border-radius: 4px; background: #e5e7eb; margin-right: 12px; }
.milestone.done .bar { background: #7c3aed; }
.milestone.done .text { color: #7c3aed; font-weight: bold; }
hr { border: none; border-bottom: 2px solid #e5e7eb; margin: 16px 0; }
.motivation { background: #fef3c7; border: 1px solid #fbbf24; border-radius: 6px; padding: 12px; text-align: center; color: #92400e; font-weight: bold; }
.footer { text-align: center; color: #9ca3af; font-size: 8.5pt; margin-top: 20px; }
"""


def roadmap_title(timeline: str) -> str:
    return '3-Month Transformation' if timeline == '3_months' else '6-Month Mastery'


def roadmap_milestones(timeline: str) -> List[Tuple[str, str, bool]]:
    return [(label, text, i == 0) for i, (label, text) in enumerate(MILESTONES[timeline])]


def roadmap_phases(timeline: str) -> List[str]:
    if timeline == '6_months':
        return PHASES + SIX_MONTH_PHASES
    return list(PHASES)


def bonus_filename(timeline: str) -> str:
    return BONUS_FILENAMES[timeline]


def render_bonus_html(profile: UserProfile, generated_on: Optional[date] = None) -> str:
    """Build the roadmap HTML. Raises ValueError for single-cycle timelines."""
    if not is_multi_cycle(profile.timeline):
        raise ValueError(f"No bonus roadmap for timeline '{profile.timeline}'")

    generated_on = generated_on or date.today()
    title = roadmap_title(profile.timeline)
    name = profile.name or DEFAULT_DISPLAY_NAME
    first_name = profile.first_name or DEFAULT_DISPLAY_NAME
    goal = (profile.goal or 'fitness').replace('_', ' ')
    level = profile.fitness_level or 'intermediate'

    milestones = ''.join(
        f'<div class="milestone{" done" if done else ""}"><div class="bar"></div>'
        f'<div class="text">{label}: {esc(text)}{" ✓" if done else ""}</div></div>'
        for label, text, done in roadmap_milestones(profile.timeline)
    )
    phases = ''.join(f'<li>{esc(phase)}</li>' for phase in roadmap_phases(profile.timeline))
    tips = ''.join(f'<li>{esc(tip)}</li>' for tip in TRACKING_TIPS)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{title}: {esc(name)}</title>
<style>{BONUS_CSS}</style>
</head>
<body>
<section class="cover">
  <h1>{title}</h1>
  <div class="name">For {esc(name)}</div>
  <div class="subtitle">Goal: {esc(goal)} • Level: {esc(level)}</div>
</section>
<div class="quote">"{QUOTE}"<div class="author">{QUOTE_AUTHOR}</div></div>
<h2>Welcome, {esc(first_name)}!</h2>
<p>This roadmap builds on your 4-week cycle to guide you through the full {title.lower()}
journey. Stay consistent, track your progress, and watch the transformation happen. You've got this!</p>
<h2>Your Journey Milestones</h2>
{milestones}
<hr>
<h2>Your Progression Roadmap</h2>
<ul>{phases}</ul>
<div class="motivation">Every rep counts. Every meal matters. Every day is progress.</div>
<h2>Track Your Wins</h2>
<ul>{tips}</ul>
<h2>Remember, {esc(first_name)}...</h2>
<p>Transformation isn't about being perfect. It's about being consistent. Show up for yourself
every day, trust the process, and the results will follow. You're not just building a better
body, you're building discipline, confidence, and a stronger version of yourself. Keep going!</p>
<div class="footer">Generated by {APP_NAME} • {generated_on.strftime('%B %d, %Y')} • Stay Consistent!</div>
</body>
</html>
"""


def render_bonus_pdf(profile: UserProfile) -> RenderedDocument:
    html = render_bonus_html(profile)
    try:
        pdf = html_to_pdf(html)
    except Exception as e:
        raise RenderError(f"Failed to render bonus roadmap: {e}") from e

    log.debug("Rendered bonus roadmap", timeline=profile.timeline, kb=len(pdf) // 1024)
    return RenderedDocument(filename=bonus_filename(profile.timeline), content=pdf, layout='bonus')
