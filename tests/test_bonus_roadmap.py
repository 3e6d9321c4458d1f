"""
Tests for the bonus roadmap document.

Run with: pytest tests/test_bonus_roadmap.py -v
"""

from datetime import date
from unittest.mock import patch

import pytest

from fitness_wizard.bonus_roadmap import (
    bonus_filename,
    render_bonus_html,
    render_bonus_pdf,
    roadmap_milestones,
    roadmap_phases,
)
from fitness_wizard.errors import RenderError
from fitness_wizard.models import UserProfile


class TestRoadmapContent:
    """Tests for milestones and phases."""

    def test_three_month_milestones(self):
        milestones = roadmap_milestones('3_months')
        assert len(milestones) == 3
        assert milestones[0] == ('Month 1', 'Foundation & Form', True)
        assert not any(done for _, _, done in milestones[1:])

    def test_six_month_phases(self):
        assert len(roadmap_milestones('6_months')) == 6
        assert len(roadmap_phases('6_months')) == 5
        assert len(roadmap_phases('3_months')) == 3

    def test_filenames(self):
        assert bonus_filename('3_months') == 'Bonus_3_Month_Roadmap.pdf'
        assert bonus_filename('6_months') == 'Bonus_6_Month_Blueprint.pdf'


class TestRenderBonusHtml:
    """Tests for render_bonus_html."""

    def test_three_month(self, multi_cycle_profile):
        html = render_bonus_html(multi_cycle_profile, generated_on=date(2026, 3, 1))
        assert '3-Month Transformation' in html
        assert 'For Jo Smith' in html
        assert 'Goal: weight loss • Level: beginner' in html
        assert 'Welcome, Jo!' in html
        assert 'Robert Collier' in html
        assert 'March 01, 2026' in html
        assert 'Months 4-5' not in html

    def test_six_month(self):
        profile = UserProfile.from_dict({'name': 'Ana', 'email': 'a@b.co', 'timeline': '6_months'})
        html = render_bonus_html(profile)
        assert '6-Month Mastery' in html
        assert 'Months 4-5' in html
        assert 'Consolidation &amp; Celebration' in html

    def test_single_cycle_rejected(self, profile):
        with pytest.raises(ValueError):
            render_bonus_html(profile)


class TestRenderBonusPdf:
    """Tests for render_bonus_pdf."""

    def test_returns_named_document(self, multi_cycle_profile):
        with patch('fitness_wizard.bonus_roadmap.html_to_pdf', return_value=b'%PDF-bonus'):
            document = render_bonus_pdf(multi_cycle_profile)
        assert document.filename == 'Bonus_3_Month_Roadmap.pdf'
        assert document.content == b'%PDF-bonus'

    def test_failure_raises_render_error(self, multi_cycle_profile):
        with patch('fitness_wizard.bonus_roadmap.html_to_pdf', side_effect=OSError('pango')):
            with pytest.raises(RenderError):
                render_bonus_pdf(multi_cycle_profile)
