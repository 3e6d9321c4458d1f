"""
Tests for text normalization and workout/meal segmentation.

Run with: pytest tests/test_text_parsing.py -v
"""

import re

import pytest

from fitness_wizard.text_parsing import (
    DelimiterRule,
    normalize_text,
    parse_meals,
    parse_workout,
    split_fragments,
)


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_empty_string(self):
        assert normalize_text('') == ''

    def test_none(self):
        assert normalize_text(None) == ''

    def test_collapses_and_trims_whitespace(self):
        assert normalize_text(' a  b ') == 'a b'

    def test_replaces_non_breaking_space(self):
        assert normalize_text('Push-ups:\u00a03x12') == 'Push-ups: 3x12'

    def test_rejoins_hyphen_linebreak(self):
        assert normalize_text('car-\n  dio session') == 'cardio session'

    def test_joins_midword_hyphen_space(self):
        assert normalize_text('pro- tein shake') == 'protein shake'

    def test_keeps_real_hyphenated_words(self):
        assert normalize_text('Push-ups and pull-ups') == 'Push-ups and pull-ups'


class TestParseWorkout:
    """Tests for the workout bullet parser."""

    def test_blank_input_returns_empty(self):
        assert parse_workout('') == []
        assert parse_workout('   ') == []

    def test_splits_on_semicolons(self):
        text = 'Push-ups: 3 sets of 12 reps; Squats: 3x15; Plank: 3 x 45s'
        assert parse_workout(text) == ['Push-ups: 3 sets of 12 reps', 'Squats: 3x15', 'Plank: 3 x 45s']

    def test_semicolon_segment_count(self):
        """Bullet count equals the number of segments longer than three characters."""
        segments = ['Lunges: 3x10', 'ab', 'Burpees: 2x8', 'xyz', 'Rows: 4x8']
        text = '; '.join(segments)
        expected = [s for s in segments if len(s.strip()) > 3]
        assert parse_workout(text) == expected

    def test_splits_on_comma_space(self):
        text = 'Jumping jacks, Mountain climbers, High knees'
        assert parse_workout(text) == ['Jumping jacks', 'Mountain climbers', 'High knees']

    def test_newline_rule(self):
        assert split_fragments('Jumping jacks\n\nHigh knees') == ['Jumping jacks', 'High knees']

    def test_does_not_split_decimals_or_hyphens(self):
        assert parse_workout('Run 3.5 km at easy pace; Push-ups: 3x10') == [
            'Run 3.5 km at easy pace', 'Push-ups: 3x10'
        ]

    def test_comma_without_space_is_kept(self):
        assert parse_workout('Squats 1,000 total reps') == ['Squats 1,000 total reps']

    def test_strips_numbered_list_markers(self):
        assert parse_workout('1. Squats 3x10; 2. Lunges 3x12') == ['Squats 3x10', 'Lunges 3x12']

    def test_numbered_short_items_kept(self):
        """Length is checked on the trimmed fragment, before the marker goes."""
        assert parse_workout('1. Run; 2. Row; 3. Ski') == ['Run', 'Row', 'Ski']

    def test_keeps_leading_rep_counts(self):
        assert parse_workout('3 sets of 10 push-ups') == ['3 sets of 10 push-ups']

    def test_falls_back_to_whole_text(self):
        """Non-blank input never yields an empty list."""
        assert parse_workout('ab; cd') == ['ab; cd']
        assert parse_workout('Run') == ['Run']

    @pytest.mark.parametrize('text', ['x', 'a;b;c', ';;;', ', , ,', '1. 2. 3.', 'ok\nno'])
    def test_never_empty_for_non_blank(self, text):
        assert parse_workout(text)


class TestSplitFragments:
    """Tests for the delimiter scanner."""

    def test_custom_rules(self):
        rules = [DelimiterRule('pipe', re.compile(r'\s*\|\s*'))]
        assert split_fragments('a | b|c', rules) == ['a', 'b', 'c']

    def test_no_delimiters(self):
        assert split_fragments('plain text') == ['plain text']


class TestParseMeals:
    """Tests for the meal section parser."""

    def test_blank_input(self):
        assert parse_meals('') == {}

    def test_labeled_sections(self):
        text = 'Breakfast: Oats (400 cal); Lunch: Chicken, rice; Dinner: Salmon'
        assert parse_meals(text) == {
            'Breakfast': ['Oats (400 cal)'],
            'Lunch': ['Chicken', 'rice'],
            'Dinner': ['Salmon'],
        }

    def test_no_labels_gives_single_meals_key(self):
        result = parse_meals('Eat plenty of vegetables; drink water')
        assert list(result.keys()) == ['Meals']
        assert result['Meals'] == ['Eat plenty of vegetables', 'drink water']

    def test_case_insensitive_labels_use_canonical_names(self):
        result = parse_meals('BREAKFAST: eggs and toast; pre-workout: banana')
        assert list(result.keys()) == ['Breakfast', 'Pre-Workout']

    def test_post_workout_not_confused_with_workout(self):
        result = parse_meals('Post-Workout: protein shake; Supper: soup bowl')
        assert result == {'Post-Workout': ['protein shake'], 'Supper': ['soup bowl']}

    def test_trailing_text_stays_with_last_label(self):
        result = parse_meals('Dinner: Salmon. Drink 2L water daily')
        assert result == {'Dinner': ['Salmon. Drink 2L water daily']}

    def test_preamble_kept_under_meals(self):
        result = parse_meals('High protein focus; Breakfast: eggs')
        assert list(result.keys()) == ['Meals', 'Breakfast']
        assert result['Meals'] == ['High protein focus']

    def test_repeated_labels_accumulate(self):
        result = parse_meals('Snacks: almonds; Lunch: wrap; Snacks: apple')
        assert result['Snacks'] == ['almonds', 'apple']

    def test_empty_section_has_no_items(self):
        result = parse_meals('Breakfast: ; Lunch: Chicken salad')
        assert result['Breakfast'] == []
        assert result['Lunch'] == ['Chicken salad']
