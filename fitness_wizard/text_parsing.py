"""
Text cleanup and segmentation for plan day content.

The language model returns each day's workout and meals as free text.
These helpers turn that text into bullet lists for the PDF:

    normalize_text   cleans extraction artifacts and whitespace
    parse_workout    splits a workout string into exercise bullets
    parse_meals      groups a meals string by meal label

Segmentation is a small lexer: an explicit, ordered list of delimiter rules
is scanned left to right, fragments are cleaned and filtered, and a final
fallback rule guarantees non-blank input never yields an empty list.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Pattern, Sequence

from .constants import FALLBACK_MEAL_KEY, MEAL_LABELS, MIN_BULLET_LENGTH


# =============================================================================
# NORMALIZER
# =============================================================================

_NBSP = re.compile('\u00a0')
_HYPHEN_LINEBREAK = re.compile(r'-\n\s*')
_MIDWORD_HYPHEN = re.compile(r'([a-zA-Z])- ([a-zA-Z])')
_WHITESPACE = re.compile(r'\s+')


def normalize_text(text: str) -> str:
    """
    Clean a free-text field.

    "car-\\ndio" -> "cardio", "pro- tein" -> "protein". The mid-word rule is
    heuristic and will also join a genuine "well- known" style compound.
    """
    if not text:
        return ''
    text = _NBSP.sub(' ', str(text))
    text = _HYPHEN_LINEBREAK.sub('', text)
    text = _MIDWORD_HYPHEN.sub(r'\1\2', text)
    text = _WHITESPACE.sub(' ', text)
    return text.strip()


# =============================================================================
# WORKOUT BULLETS
# =============================================================================

@dataclass(frozen=True)
class DelimiterRule:
    """A separator between bullet fragments."""
    name: str
    pattern: Pattern[str]


# Periods and hyphens are never delimiters: "3.5 km", "push-ups"
WORKOUT_DELIMITERS: Sequence[DelimiterRule] = (
    DelimiterRule('semicolon', re.compile(r';\s*')),
    DelimiterRule('comma', re.compile(r',\s+')),
    DelimiterRule('newline', re.compile(r'\n+')),
)

# "1. Squats" -> "Squats"; requires the period and space so "3 sets of 10" survives
_LIST_MARKER = re.compile(r'^\d+\.\s+')


def split_fragments(text: str, rules: Sequence[DelimiterRule] = WORKOUT_DELIMITERS) -> List[str]:
    """Split text at every position where one of the rules matches."""
    fragments = []
    start = pos = 0
    while pos < len(text):
        for rule in rules:
            match = rule.pattern.match(text, pos)
            if match:
                fragments.append(text[start:pos])
                start = pos = match.end()
                break
        else:
            pos += 1
    fragments.append(text[start:])
    return fragments


def clean_fragment(fragment: str) -> str:
    return _LIST_MARKER.sub('', fragment.strip()).strip()


def with_fallback(items: List[str], normalized: str) -> List[str]:
    """Never hand back an empty list for non-blank text."""
    if items or not normalized:
        return items
    return [normalized]


def parse_workout(text: str) -> List[str]:
    """
    Split a workout description into exercise bullets.

    "Push-ups: 3x12; Plank: 3x45s" -> ["Push-ups: 3x12", "Plank: 3x45s"]
    Fragments shorter than four characters are dropped before any
    "1. " list marker is stripped, so "1. Run" still counts.
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    bullets = []
    for fragment in split_fragments(normalized):
        if len(fragment.strip()) < MIN_BULLET_LENGTH:
            continue
        cleaned = clean_fragment(fragment)
        if cleaned:
            bullets.append(cleaned)

    return with_fallback(bullets, normalized)


# =============================================================================
# MEAL SECTIONS
# =============================================================================

_CANONICAL_LABELS = {label.lower(): label for label in MEAL_LABELS}

# Longest first so the alternation never stops at a shorter prefix
_LABEL_ALTERNATION = '|'.join(
    re.escape(label) for label in sorted(MEAL_LABELS, key=len, reverse=True)
)
MEAL_HEADER = re.compile(rf'(?<![A-Za-z-])({_LABEL_ALTERNATION})\s*:', re.IGNORECASE)


def parse_meals(text: str) -> Dict[str, List[str]]:
    """
    Group a day's meals text by label.

    "Breakfast: Oats (400 cal); Lunch: Chicken, rice" ->
        {"Breakfast": ["Oats (400 cal)"], "Lunch": ["Chicken", "rice"]}

    A section runs from its "Label:" header to the next header or the end of
    the text, so anything after the last header belongs to that section.
    Text before the first header is kept under "Meals". With no headers at
    all the whole text becomes {"Meals": [...]}.
    """
    normalized = normalize_text(text)
    if not normalized:
        return {}

    headers = list(MEAL_HEADER.finditer(normalized))
    if not headers:
        return {FALLBACK_MEAL_KEY: parse_workout(normalized)}

    sections: Dict[str, List[str]] = {}

    preamble = normalized[:headers[0].start()].strip(' ;,')
    if len(preamble) >= MIN_BULLET_LENGTH:
        sections[FALLBACK_MEAL_KEY] = parse_workout(preamble)

    for index, header in enumerate(headers):
        end = headers[index + 1].start() if index + 1 < len(headers) else len(normalized)
        label = _CANONICAL_LABELS[header.group(1).lower()]
        content = normalized[header.end():end].strip(' ;,')
        sections.setdefault(label, []).extend(parse_workout(content))

    return sections
