"""
Plan PDF renderer.

Builds a styled HTML document for a PlanDocument and converts it to PDF
with WeasyPrint. Two layouts share the same markup:

    desktop   two-column day grid, 10pt type
    mobile    single column, smaller type, narrower margins

Every page carries a running footer with the generation timestamp, and each
week after the first starts on a new page.
"""

from datetime import datetime
from typing import Dict, List, Optional

from .constants import (
    APP_NAME,
    DEFAULT_DISPLAY_NAME,
    DEFAULT_EQUIPMENT_LABEL,
    DEFAULT_INTRODUCTION,
    DOCUMENT_VERSION,
    LAYOUT_DESKTOP,
    LAYOUT_MOBILE,
    LAYOUTS,
    PLAN_FILENAMES,
    SINGLE_CYCLE_TIMELINE,
    humanize,
)
from .errors import RenderError
from .logger import get_logger
from .models import DayEntry, PlanDocument, RenderedDocument, UserProfile, WeekEntry
from .text_parsing import parse_meals, parse_workout

log = get_logger('fitness_wizard.pdf_generator')

EMPTY_PLAN_MESSAGE = 'Your personalized plan is being prepared. Please try generating again.'
EMPTY_WEEK_MESSAGE = 'No days scheduled for this week.'


# =============================================================================
# STYLES
# =============================================================================

BASE_CSS = """
@page {
  size: A4;
  margin: 18mm 14mm 22mm 14mm;
  @bottom-center { content: element(footer); }
}
* { box-sizing: border-box; }
body { font-family: 'Helvetica Neue', Helvetica, Arial, sans-serif; color: #1f2933; line-height: 1.45; }
.footer { position: running(footer); text-align: center; color: #7b8794; font-size: 8pt; }
.header { background: #1e3a8a; color: #fff; padding: 14px 18px; border-radius: 6px; margin-bottom: 14px; }
.header h1 { margin: 0 0 4px 0; font-size: 20pt; letter-spacing: 0.5px; }
.header .subtitle { color: #c7d2fe; font-size: 10pt; }
.profile { display: flex; flex-wrap: wrap; gap: 6px 18px; background: #f1f5f9; padding: 10px 14px; border-radius: 6px; margin-bottom: 12px; }
.profile .item { font-size: 9pt; }
.profile .label { color: #52606d; font-weight: bold; text-transform: uppercase; margin-right: 4px; }
.intro { font-style: italic; margin: 0 0 14px 0; }
.week { break-before: page; }
.week.first { break-before: auto; }
.week h2 { color: #1e3a8a; border-bottom: 2px solid #1e3a8a; padding-bottom: 3px; margin: 0 0 10px 0; }
.day { border: 1px solid #cbd2d9; border-radius: 6px; padding: 8px 10px; break-inside: avoid; }
.day h3 { margin: 0 0 2px 0; color: #102a43; }
.day .timing { color: #52606d; margin-bottom: 6px; }
.day h4 { margin: 6px 0 2px 0; color: #2563eb; letter-spacing: 1px; }
.day ul { margin: 0 0 4px 0; padding-left: 16px; }
.meal-label { font-weight: bold; margin-top: 3px; }
.empty { color: #7b8794; font-style: italic; }
.progression { background: #fef3c7; border-left: 4px solid #d97706; padding: 10px 14px; margin-top: 16px; border-radius: 4px; break-inside: avoid; }
.progression h2 { margin: 0 0 6px 0; color: #92400e; }
"""

DESKTOP_CSS = BASE_CSS + """
body { font-size: 10pt; }
.days { display: grid; grid-template-columns: 1fr 1fr; gap: 10px; }
.day h3 { font-size: 11pt; }
.day h4 { font-size: 8.5pt; }
"""

MOBILE_CSS = BASE_CSS.replace('margin: 18mm 14mm 22mm 14mm', 'margin: 10mm 8mm 16mm 8mm') + """
body { font-size: 8.5pt; }
.header h1 { font-size: 15pt; }
.days { display: block; }
.day { margin-bottom: 8px; }
.day h3 { font-size: 10pt; }
.day h4 { font-size: 7.5pt; }
"""

LAYOUT_CSS: Dict[str, str] = {
    LAYOUT_DESKTOP: DESKTOP_CSS,
    LAYOUT_MOBILE: MOBILE_CSS,
}


# =============================================================================
# HTML BUILDERS
# =============================================================================

def esc(text) -> str:
    """HTML-escape text."""
    if not text:
        return ''
    return (str(text)
            .replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;'))


def plan_subtitle(timeline: str) -> str:
    if timeline == SINGLE_CYCLE_TIMELINE:
        return 'Your Complete 4-Week Plan'
    return f"Cycle 1 of Your {humanize(timeline)} Journey"


def _bullets(items: List[str]) -> str:
    if not items:
        return ""
    return '<ul>' + ''.join(f'<li>{esc(item)}</li>' for item in items) + '</ul>'


def _render_profile(profile: UserProfile) -> str:
    equipment = ', '.join(profile.equipment) if profile.equipment else DEFAULT_EQUIPMENT_LABEL
    rows = [
        ('Goal', humanize(profile.goal)),
        ('Fitness Level', humanize(profile.fitness_level)),
        ('Timeline', humanize(profile.timeline)),
        ('Equipment', equipment),
    ]
    cells = ''.join(
        f'<div class="item"><span class="label">{label}:</span>{esc(value)}</div>'
        for label, value in rows
    )
    return f'<section class="profile">{cells}</section>'


def _render_day(day: DayEntry) -> str:
    workout = parse_workout(day.workout)
    nutrition = ''.join(
        f'<div class="meal-label">{esc(label)}</div>{_bullets(items)}'
        for label, items in parse_meals(day.meals).items()
    )

    return (
        f'<div class="day">'
        f'<h3>{esc(day.day_title)} — {esc(day.focus)}</h3>'
        f'<div class="timing">Timing: {esc(day.timing)}</div>'
        f'<h4>WORKOUT</h4>{_bullets(workout)}'
        f'<h4>NUTRITION</h4>{nutrition}'
        f'</div>'
    )


def _render_week(week: WeekEntry, index: int) -> str:
    css_class = 'week first' if index == 0 else 'week'
    if week.days:
        body = '<div class="days">' + ''.join(_render_day(day) for day in week.days) + '</div>'
    else:
        body = f'<p class="empty">{EMPTY_WEEK_MESSAGE}</p>'
    return f'<section class="{css_class}"><h2>{esc(week.week_title)}</h2>{body}</section>'


def _render_progression(profile: UserProfile, plan: PlanDocument) -> str:
    if not plan.progression_notes or profile.timeline == SINGLE_CYCLE_TIMELINE:
        return ''
    return (
        f'<section class="progression">'
        f'<h2>Progression Plan for Your {esc(humanize(profile.timeline))} Journey</h2>'
        f'<p>{esc(plan.progression_notes)}</p>'
        f'</section>'
    )


def render_plan_html(
    profile: UserProfile,
    plan: PlanDocument,
    layout: str = LAYOUT_DESKTOP,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the plan as a standalone HTML document for the given layout."""
    if layout not in LAYOUT_CSS:
        raise ValueError(f"Unknown layout '{layout}' (expected one of {', '.join(LAYOUTS)})")

    generated_at = generated_at or datetime.now()
    timestamp = generated_at.strftime('%B %d, %Y %H:%M')
    name = profile.name or DEFAULT_DISPLAY_NAME

    if plan.weeks:
        weeks_html = ''.join(_render_week(week, i) for i, week in enumerate(plan.weeks))
    else:
        weeks_html = f'<p class="empty">{EMPTY_PLAN_MESSAGE}</p>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{esc(plan.title or 'Fitness Plan')}: {esc(name)}</title>
<style>{LAYOUT_CSS[layout]}</style>
</head>
<body class="{layout}">
<div class="footer">Generated by {APP_NAME} • {timestamp} • {DOCUMENT_VERSION} • Stay Consistent!</div>
<header class="header">
  <h1>Fitness Wizard Plan</h1>
  <div class="subtitle">Customized for {esc(name)} • {esc(plan_subtitle(profile.timeline))}</div>
</header>
{_render_profile(profile)}
<p class="intro">{esc(plan.introduction or DEFAULT_INTRODUCTION)}</p>
{weeks_html}
{_render_progression(profile, plan)}
</body>
</html>
"""


# =============================================================================
# PDF CONVERSION
# =============================================================================

def html_to_pdf(html: str) -> bytes:
    """Convert an HTML string to PDF bytes with WeasyPrint."""
    from weasyprint import HTML

    return HTML(string=html).write_pdf()


def render_plan_pdf(profile: UserProfile, plan: PlanDocument, layout: str = LAYOUT_DESKTOP) -> bytes:
    """Render one layout to PDF bytes. Any failure raises RenderError."""
    try:
        pdf = html_to_pdf(render_plan_html(profile, plan, layout))
    except Exception as e:
        log.error(f"PDF render failed: {e}", layout=layout)
        raise RenderError(f"Failed to render {layout} PDF: {e}") from e

    if not pdf:
        raise RenderError(f"WeasyPrint produced an empty {layout} PDF")

    log.debug("Rendered PDF", layout=layout, kb=len(pdf) // 1024)
    return pdf


def render_plan_documents(profile: UserProfile, plan: PlanDocument) -> List[RenderedDocument]:
    """Desktop and mobile PDFs, in that order."""
    return [
        RenderedDocument(
            filename=PLAN_FILENAMES[layout],
            content=render_plan_pdf(profile, plan, layout),
            layout=layout,
        )
        for layout in LAYOUTS
    ]
