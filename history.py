"""
Workout history aggregation
Reads a user's profile, recent workouts and recent exercises and reduces them
to the short text blocks used in the recommendation prompt
"""

from dataclasses import dataclass, field
from typing import List, Optional

from database import adapt_query, get_cursor, get_db_connection
from errors import ProfileFetchError
from models import ExerciseRecord, Profile, WorkoutRecord

WORKOUT_HISTORY_LIMIT = 10
EXERCISE_HISTORY_LIMIT = 20

NO_WORKOUT_HISTORY = "No workout history"
NO_EXERCISE_HISTORY = "No exercise details"


@dataclass
class HistorySnapshot:
    profile: Profile
    workouts: List[WorkoutRecord] = field(default_factory=list)
    exercises: List[ExerciseRecord] = field(default_factory=list)
    workout_text: str = NO_WORKOUT_HISTORY
    exercise_text: str = NO_EXERCISE_HISTORY


def fetch_profile(user_id) -> Profile:
    """Fetch the user's profile - a missing profile aborts the request"""
    try:
        with get_db_connection() as conn:
            cur = get_cursor(conn)
            cur.execute(adapt_query("""
                SELECT id, username, fitness_level, fitness_goals
                FROM profiles
                WHERE id = ?
            """), (str(user_id),))
            row = cur.fetchone()
    except Exception as e:
        print(f"Profile fetch error: {e}")
        raise ProfileFetchError() from e

    if row is None:
        print(f"Profile fetch error: no profile for user {user_id}")
        raise ProfileFetchError()

    return Profile(id=row[0], username=row[1], fitness_level=row[2], fitness_goals=row[3])


def fetch_recent_workouts(user_id, limit=WORKOUT_HISTORY_LIMIT) -> List[WorkoutRecord]:
    """Most recent workouts first; query failures degrade to no history"""
    try:
        with get_db_connection() as conn:
            cur = get_cursor(conn)
            cur.execute(adapt_query("""
                SELECT id, workout_date, total_duration, total_calories
                FROM workouts
                WHERE user_id = ?
                ORDER BY workout_date DESC, id DESC
                LIMIT ?
            """), (str(user_id), int(limit)))
            rows = cur.fetchall()
    except Exception as e:
        print(f"Workouts fetch error: {e}")
        return []

    return [
        WorkoutRecord(id=row[0], workout_date=row[1], total_duration=row[2], total_calories=row[3])
        for row in rows
    ]


def fetch_recent_exercises(workout_ids, limit=EXERCISE_HISTORY_LIMIT) -> List[ExerciseRecord]:
    """Exercises belonging to the given workouts, newest workout first"""
    workout_ids = [int(w) for w in workout_ids]
    if not workout_ids:
        return []

    placeholders = ', '.join('?' for _ in workout_ids)
    try:
        with get_db_connection() as conn:
            cur = get_cursor(conn)
            cur.execute(adapt_query(f"""
                SELECT e.workout_id, e.type, e.name, e.sets, e.reps, e.duration, e.weight
                FROM exercises e
                JOIN workouts w ON w.id = e.workout_id
                WHERE e.workout_id IN ({placeholders})
                ORDER BY w.workout_date DESC, e.id
                LIMIT ?
            """), (*workout_ids, int(limit)))
            rows = cur.fetchall()
    except Exception as e:
        print(f"Exercises fetch error: {e}")
        return []

    return [
        ExerciseRecord(
            workout_id=row[0], type=row[1], name=row[2],
            sets=row[3], reps=row[4], duration=row[5], weight=row[6],
        )
        for row in rows
    ]


def format_workout_history(workouts: List[WorkoutRecord]) -> str:
    if not workouts:
        return NO_WORKOUT_HISTORY
    return "\n".join(
        f"Date: {w.workout_date}, Duration: {w.total_duration}min, Calories: {w.total_calories}"
        for w in workouts
    )


def format_exercise_line(exercise: ExerciseRecord) -> str:
    if exercise.sets:
        detail = f"{exercise.sets}x{exercise.reps}"
    else:
        detail = f"{exercise.duration}min"
    return f"{exercise.name} ({exercise.type}): {detail}"


def format_exercise_history(exercises: List[ExerciseRecord]) -> str:
    if not exercises:
        return NO_EXERCISE_HISTORY
    return "\n".join(format_exercise_line(e) for e in exercises)


def aggregate_history(user_id, workout_limit: Optional[int] = None) -> HistorySnapshot:
    """
    Collect everything the prompt needs about the user's past training.
    Only the profile is required; missing workouts or exercises become
    placeholder text.
    """
    if workout_limit is None:
        workout_limit = WORKOUT_HISTORY_LIMIT
    profile = fetch_profile(user_id)
    workouts = fetch_recent_workouts(user_id, workout_limit)
    exercises = fetch_recent_exercises([w.id for w in workouts])

    return HistorySnapshot(
        profile=profile,
        workouts=workouts,
        exercises=exercises,
        workout_text=format_workout_history(workouts),
        exercise_text=format_exercise_history(exercises),
    )
