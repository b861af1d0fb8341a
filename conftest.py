"""
Shared pytest fixtures: a throwaway SQLite database per test and a fake
Claude client
"""

import os
import tempfile
from types import SimpleNamespace

import anthropic
import httpx
import pytest

# app.py initializes the database at import time; keep that away from the repo
os.environ['DATABASE_URL'] = 'sqlite:///' + os.path.join(tempfile.mkdtemp(), 'import.db')
os.environ.pop('ANTHROPIC_API_KEY', None)
os.environ.pop('RUN_EVALS', None)

from database import get_cursor, get_db_connection, init_db  # noqa: E402
from recommendation_generator import TOOL_NAME  # noqa: E402


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.setenv('DATABASE_URL', f"sqlite:///{tmp_path / 'test.db'}")
    init_db()
    return tmp_path / 'test.db'


class Seeder:
    """Writes rows owned by other parts of the app (profiles, workout log)"""

    def profile(self, user_id='user-1', fitness_level='beginner', fitness_goals='lose weight', username='sam'):
        with get_db_connection() as conn:
            cur = get_cursor(conn)
            cur.execute(
                "INSERT INTO profiles (id, username, fitness_level, fitness_goals) VALUES (?, ?, ?, ?)",
                (user_id, username, fitness_level, fitness_goals),
            )

    def workout(self, user_id='user-1', workout_date='2024-01-01', total_duration=45, total_calories=300, exercises=()):
        with get_db_connection() as conn:
            cur = get_cursor(conn)
            cur.execute(
                "INSERT INTO workouts (user_id, workout_date, total_duration, total_calories) VALUES (?, ?, ?, ?)",
                (user_id, workout_date, total_duration, total_calories),
            )
            workout_id = cur.lastrowid
            for e in exercises:
                cur.execute(
                    "INSERT INTO exercises (workout_id, type, name, sets, reps, duration, weight) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (workout_id, e.get('type'), e['name'], e.get('sets'), e.get('reps'), e.get('duration'), e.get('weight')),
                )
        return workout_id


@pytest.fixture
def seed(db):
    return Seeder()


def make_plan(title='Full Body Starter', difficulty='beginner', exercises=None):
    return {
        'title': title,
        'description': 'Compound lifts to build a base',
        'duration': '45 minutes',
        'difficulty': difficulty,
        'exercises': exercises if exercises is not None else [
            {'name': 'Goblet Squat', 'sets': '3', 'reps': '10', 'notes': 'Chest up'},
            {'name': 'Push-up', 'sets': '3', 'reps': '8-10'},
            {'name': 'Dumbbell Row', 'sets': '3', 'reps': '12'},
        ],
        'benefits': ['Builds strength', 'Improves posture'],
    }


@pytest.fixture
def plan_payload():
    return make_plan


def tool_message(arguments, name=TOOL_NAME):
    return SimpleNamespace(
        content=[SimpleNamespace(type='tool_use', id='toolu_01', name=name, input=arguments)],
        usage=SimpleNamespace(input_tokens=1200, output_tokens=800),
        stop_reason='tool_use',
    )


def text_message(text="Here are some workouts"):
    return SimpleNamespace(
        content=[SimpleNamespace(type='text', text=text)],
        usage=SimpleNamespace(input_tokens=1200, output_tokens=50),
        stop_reason='end_turn',
    )


def api_status_error(status):
    request = httpx.Request('POST', 'https://api.anthropic.com/v1/messages')
    response = httpx.Response(status, request=request)
    error_class = anthropic.RateLimitError if status == 429 else anthropic.APIStatusError
    return error_class(f"Error code: {status}", response=response, body=None)


class FakeMessages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeClient:
    def __init__(self, response=None, error=None):
        self.messages = FakeMessages(response, error)


@pytest.fixture
def fake_claude():
    """Build a fake client; pass response= or error="""
    return FakeClient


@pytest.fixture
def claude_responses():
    return SimpleNamespace(
        tool_message=tool_message,
        text_message=text_message,
        api_status_error=api_status_error,
        make_plan=make_plan,
    )
