"""
Shared fixtures: sample submissions, a fake chat client, a fake PDF
renderer and a recording background queue.
"""

import json
from types import SimpleNamespace

import pytest

from fitness_wizard.config_loader import Config, EmailSettings, LLMSettings, reset_config
from fitness_wizard.models import PlanDocument, RenderedDocument, UserProfile


def sample_plan_data(progression_notes=None):
    plan = {
        'title': 'Your Custom 4-Week Cycle',
        'introduction': 'Jo, this plan will get you moving toward weight loss.',
        'weeks': [
            {
                'weekTitle': f'Week {n}: Foundation',
                'days': [
                    {
                        'dayTitle': f'Day {d}',
                        'focus': 'Full Body',
                        'timing': 'Wake: 7am, Workout: 8am',
                        'workout': 'Push-ups: 3 sets of 12 reps; Squats: 3 sets of 15 reps; Plank: 3 x 45s',
                        'meals': ('Breakfast: Oatmeal with banana (400 cal); Lunch: Chicken salad (550 cal); '
                                  'Dinner: Salmon with rice (600 cal); Snacks: Greek yogurt'),
                    }
                    for d in range(1, 8)
                ],
            }
            for n in range(1, 5)
        ],
    }
    if progression_notes:
        plan['progressionNotes'] = progression_notes
    return plan


class FakeCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeChatClient:
    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


def fake_renderer(profile, plan):
    return [
        RenderedDocument('Your_4_Week_Plan.pdf', b'%PDF-1.7 desktop', 'desktop'),
        RenderedDocument('Your_4_Week_Plan_Mobile.pdf', b'%PDF-1.7 mobile', 'mobile'),
    ]


def fake_bonus_renderer(profile):
    return RenderedDocument('Bonus_3_Month_Roadmap.pdf', b'%PDF-1.7 bonus', 'bonus')


class RecordingQueue:
    """Records submitted tasks instead of running them."""

    def __init__(self):
        self.tasks = []
        self.failures = []

    def submit(self, name, fn, *args, **kwargs):
        self.tasks.append((name, fn, args, kwargs))

    def run_all(self):
        return [fn(*args, **kwargs) for _, fn, args, kwargs in self.tasks]

    def wait(self, timeout=None):
        return True

    def shutdown(self, wait=True):
        pass


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def profile_data():
    return {
        'name': 'Jo Smith',
        'email': 'jo@example.com',
        'goal': 'weight_loss',
        'fitnessLevel': 'beginner',
        'timeline': '1_month',
        'equipment': [],
    }


@pytest.fixture
def profile(profile_data):
    return UserProfile.from_dict(profile_data)


@pytest.fixture
def multi_cycle_profile(profile_data):
    return UserProfile.from_dict(dict(profile_data, timeline='3_months'))


@pytest.fixture
def plan():
    return PlanDocument.from_dict(sample_plan_data())


@pytest.fixture
def plan_json():
    return json.dumps(sample_plan_data())


@pytest.fixture
def llm_settings():
    return LLMSettings(api_key='test-key', model='test-model')


@pytest.fixture
def file_email_settings(tmp_path):
    return EmailSettings(provider='file', preview_dir=str(tmp_path / 'outbox'))


@pytest.fixture
def recording_queue():
    return RecordingQueue()


@pytest.fixture
def test_config():
    return Config(data={
        'app': {'environment': 'test', 'bonus_workers': 1},
        'llm': {'api_key': 'test-key', 'model': 'test-model'},
        'email': {'provider': 'none'},
    })
