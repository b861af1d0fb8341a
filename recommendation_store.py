"""
Storage for saved (favorited) recommendations and completion feedback
All queries are filtered by owner id
"""

import json
from datetime import datetime
from typing import Iterable, List, Optional

from database import adapt_query, get_cursor, get_db_connection, insert_returning_id
from models import CompletionFeedback, Exercise, Recommendation, SavedRecommendation

FEEDBACK_HISTORY_LIMIT = 10

_SAVED_COLUMNS = "id, title, description, duration, difficulty, exercises, benefits, saved_at"


def _timestamp(value):
    # SQLite hands back strings, psycopg2 hands back datetimes
    if isinstance(value, datetime):
        return value.isoformat(sep=' ')
    return value


def _saved_from_row(row) -> SavedRecommendation:
    plan = Recommendation(
        title=row[1],
        description=row[2],
        duration=row[3],
        difficulty=row[4],
        exercises=[Exercise(**e) for e in json.loads(row[5])],
        benefits=list(json.loads(row[6])),
    )
    return SavedRecommendation(id=row[0], plan=plan, saved_at=_timestamp(row[7]))


def save_recommendation(user_id, recommendation: Recommendation) -> SavedRecommendation:
    """Insert a favorite; identical content saved twice becomes two rows"""
    exercises = json.dumps([e.model_dump(exclude_none=True) for e in recommendation.exercises])
    with get_db_connection() as conn:
        cur = get_cursor(conn)
        saved_id = insert_returning_id(cur, """
            INSERT INTO saved_recommendations
                (user_id, title, description, duration, difficulty, exercises, benefits)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            str(user_id),
            recommendation.title,
            recommendation.description,
            recommendation.duration,
            recommendation.difficulty,
            exercises,
            json.dumps(recommendation.benefits),
        ))
        cur.execute(adapt_query(f"""
            SELECT {_SAVED_COLUMNS}
            FROM saved_recommendations
            WHERE id = ?
        """), (saved_id,))
        return _saved_from_row(cur.fetchone())


def list_saved_recommendations(user_id) -> List[SavedRecommendation]:
    """Favorites, most recently saved first"""
    with get_db_connection() as conn:
        cur = get_cursor(conn)
        cur.execute(adapt_query(f"""
            SELECT {_SAVED_COLUMNS}
            FROM saved_recommendations
            WHERE user_id = ?
            ORDER BY saved_at DESC, id DESC
        """), (str(user_id),))
        return [_saved_from_row(row) for row in cur.fetchall()]


def get_saved_recommendation(user_id, saved_id) -> Optional[SavedRecommendation]:
    with get_db_connection() as conn:
        cur = get_cursor(conn)
        cur.execute(adapt_query(f"""
            SELECT {_SAVED_COLUMNS}
            FROM saved_recommendations
            WHERE id = ? AND user_id = ?
        """), (int(saved_id), str(user_id)))
        row = cur.fetchone()
    return _saved_from_row(row) if row else None


def delete_saved_recommendation(user_id, saved_id) -> bool:
    """Hard delete; returns False when nothing matched"""
    with get_db_connection() as conn:
        cur = get_cursor(conn)
        cur.execute(adapt_query("""
            DELETE FROM saved_recommendations
            WHERE id = ? AND user_id = ?
        """), (int(saved_id), str(user_id)))
        return cur.rowcount > 0


def add_completion(user_id, recommendation_id, rating, notes=None,
                   completed_exercises: Iterable[str] = ()) -> CompletionFeedback:
    """Record one completion of a saved recommendation"""
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValueError("Rating must be an integer between 1 and 5")

    completed = list(completed_exercises)
    with get_db_connection() as conn:
        cur = get_cursor(conn)
        completion_id = insert_returning_id(cur, """
            INSERT INTO recommendation_completions
                (user_id, recommendation_id, rating, notes, completed_exercises)
            VALUES (?, ?, ?, ?, ?)
        """, (str(user_id), int(recommendation_id), rating, notes, json.dumps(completed)))
        cur.execute(adapt_query("""
            SELECT created_at FROM recommendation_completions WHERE id = ?
        """), (completion_id,))
        created_at = cur.fetchone()[0]

    return CompletionFeedback(
        id=completion_id,
        recommendation_id=int(recommendation_id),
        rating=rating,
        notes=notes,
        completed_exercises=completed,
        created_at=_timestamp(created_at),
    )


def get_recent_completions(user_id, limit=FEEDBACK_HISTORY_LIMIT) -> List[CompletionFeedback]:
    """
    Newest completion feedback first, each joined with the favorite it
    refers to. Feedback whose favorite was removed keeps recommendation=None.
    """
    with get_db_connection() as conn:
        cur = get_cursor(conn)
        cur.execute(adapt_query("""
            SELECT c.id, c.recommendation_id, c.rating, c.notes, c.completed_exercises, c.created_at,
                   s.id, s.title, s.description, s.duration, s.difficulty, s.exercises, s.benefits, s.saved_at
            FROM recommendation_completions c
            LEFT JOIN saved_recommendations s
                ON s.id = c.recommendation_id AND s.user_id = c.user_id
            WHERE c.user_id = ?
            ORDER BY c.created_at DESC, c.id DESC
            LIMIT ?
        """), (str(user_id), int(limit)))
        rows = cur.fetchall()

    completions = []
    for row in rows:
        parent = _saved_from_row(tuple(row[6:])) if row[6] is not None else None
        completions.append(CompletionFeedback(
            id=row[0],
            recommendation_id=row[1],
            rating=row[2],
            notes=row[3],
            completed_exercises=json.loads(row[4]),
            created_at=_timestamp(row[5]),
            recommendation=parent,
        ))
    return completions
