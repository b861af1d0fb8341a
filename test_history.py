"""
Tests for workout history aggregation
"""

import pytest

from errors import ProfileFetchError
from history import (
    NO_EXERCISE_HISTORY,
    NO_WORKOUT_HISTORY,
    aggregate_history,
    fetch_recent_exercises,
    fetch_recent_workouts,
    format_exercise_line,
)
from models import ExerciseRecord


def test_missing_profile_is_fatal(db):
    with pytest.raises(ProfileFetchError) as exc:
        aggregate_history('nobody')
    assert exc.value.message == "Failed to fetch user profile"
    assert exc.value.status_code == 500


def test_no_history_uses_placeholders(seed):
    seed.profile('user-1', 'beginner', 'lose weight')

    snapshot = aggregate_history('user-1')

    assert snapshot.profile.fitness_level == 'beginner'
    assert snapshot.profile.fitness_goals == 'lose weight'
    assert snapshot.workouts == []
    assert snapshot.workout_text == NO_WORKOUT_HISTORY
    assert snapshot.exercise_text == NO_EXERCISE_HISTORY


def test_ten_workouts_most_recent_first(seed):
    seed.profile('user-1')
    for day in range(1, 11):
        seed.workout('user-1', f'2024-03-{day:02d}', total_duration=30 + day, total_calories=200 + day)

    lines = aggregate_history('user-1').workout_text.split('\n')

    assert len(lines) == 10
    assert lines[0] == "Date: 2024-03-10, Duration: 40min, Calories: 210"
    assert lines[-1] == "Date: 2024-03-01, Duration: 31min, Calories: 201"


def test_zero_workout_limit_means_no_workouts(seed):
    seed.profile('user-1')
    seed.workout('user-1', '2024-03-01')

    snapshot = aggregate_history('user-1', workout_limit=0)

    assert snapshot.workouts == []
    assert snapshot.workout_text == NO_WORKOUT_HISTORY
    assert snapshot.exercise_text == NO_EXERCISE_HISTORY


def test_workouts_capped_at_ten(seed):
    seed.profile('user-1')
    for day in range(1, 16):
        seed.workout('user-1', f'2024-03-{day:02d}')

    workouts = fetch_recent_workouts('user-1')

    assert len(workouts) == 10
    assert workouts[0].workout_date == '2024-03-15'


def test_workouts_filtered_by_owner(seed):
    seed.profile('user-1')
    seed.workout('user-1', '2024-03-01')
    seed.workout('user-2', '2024-03-02')

    assert [w.workout_date for w in fetch_recent_workouts('user-1')] == ['2024-03-01']


def test_exercise_lines_sets_or_duration(seed):
    seed.profile('user-1')
    seed.workout('user-1', '2024-03-01', exercises=[
        {'type': 'strength', 'name': 'Bench Press', 'sets': 3, 'reps': 8, 'weight': 60},
        {'type': 'cardio', 'name': 'Running', 'duration': 20},
    ])

    snapshot = aggregate_history('user-1')

    assert snapshot.exercise_text.split('\n') == [
        "Bench Press (strength): 3x8",
        "Running (cardio): 20min",
    ]


def test_exercises_capped_at_twenty(seed):
    seed.profile('user-1')
    ids = [
        seed.workout('user-1', f'2024-03-{day:02d}', exercises=[
            {'type': 'strength', 'name': f'Lift {day}-{n}', 'sets': 3, 'reps': 10} for n in range(5)
        ])
        for day in range(1, 6)
    ]

    exercises = fetch_recent_exercises(ids)

    assert len(exercises) == 20
    assert exercises[0].name.startswith('Lift 5-')


def test_no_workout_ids_means_no_query(db):
    assert fetch_recent_exercises([]) == []


def test_format_exercise_line_without_sets():
    line = format_exercise_line(ExerciseRecord(workout_id=1, type='mobility', name='Yoga Flow', duration=15))
    assert line == "Yoga Flow (mobility): 15min"
