"""
Tests for saved recommendations and completion feedback storage
"""

import pytest

import recommendation_store as store
from models import Recommendation


@pytest.fixture
def plan(plan_payload):
    return Recommendation.model_validate(plan_payload())


def test_save_and_list(db, plan):
    saved = store.save_recommendation('user-1', plan)

    assert saved.id
    assert saved.saved_at
    assert saved.plan == plan
    assert store.list_saved_recommendations('user-1') == [saved]


def test_duplicate_saves_make_distinct_rows(db, plan):
    first = store.save_recommendation('user-1', plan)
    second = store.save_recommendation('user-1', plan)

    assert first.id != second.id
    assert first.plan == second.plan
    assert len(store.list_saved_recommendations('user-1')) == 2


def test_favorites_newest_first(db, plan_payload):
    for title in ('First', 'Second', 'Third'):
        store.save_recommendation('user-1', Recommendation.model_validate(plan_payload(title=title)))

    titles = [s.title for s in store.list_saved_recommendations('user-1')]

    assert titles == ['Third', 'Second', 'First']


def test_optional_notes_round_trip(db, plan):
    saved = store.save_recommendation('user-1', plan)

    exercises = store.get_saved_recommendation('user-1', saved.id).plan.exercises

    assert exercises[0].notes == 'Chest up'
    assert exercises[1].notes is None


def test_delete_is_owner_scoped(db, plan):
    saved = store.save_recommendation('user-1', plan)

    assert store.delete_saved_recommendation('user-2', saved.id) is False
    assert store.delete_saved_recommendation('user-1', saved.id) is True
    assert store.delete_saved_recommendation('user-1', saved.id) is False
    assert store.get_saved_recommendation('user-1', saved.id) is None


@pytest.mark.parametrize('rating', [0, 6, -1, 3.5, '4', True])
def test_add_completion_rejects_bad_rating(db, plan, rating):
    saved = store.save_recommendation('user-1', plan)

    with pytest.raises(ValueError):
        store.add_completion('user-1', saved.id, rating)

    assert store.get_recent_completions('user-1') == []


def test_completions_joined_with_parent(db, plan):
    saved = store.save_recommendation('user-1', plan)
    store.add_completion('user-1', saved.id, 4, 'Felt good', ['Goblet Squat', 'Push-up'])

    [completion] = store.get_recent_completions('user-1')

    assert completion.rating == 4
    assert completion.notes == 'Felt good'
    assert completion.completed_exercises == ['Goblet Squat', 'Push-up']
    assert completion.recommendation.id == saved.id
    assert completion.recommendation.title == plan.title


def test_completion_outlives_deleted_parent(db, plan):
    saved = store.save_recommendation('user-1', plan)
    store.add_completion('user-1', saved.id, 2, 'Too easy')
    store.delete_saved_recommendation('user-1', saved.id)

    [completion] = store.get_recent_completions('user-1')

    assert completion.recommendation_id == saved.id
    assert completion.recommendation is None


def test_multiple_completions_per_favorite(db, plan):
    saved = store.save_recommendation('user-1', plan)
    store.add_completion('user-1', saved.id, 3)
    store.add_completion('user-1', saved.id, 5)

    completions = store.get_recent_completions('user-1')

    assert [c.rating for c in completions] == [5, 3]


def test_recent_completions_capped(db, plan):
    saved = store.save_recommendation('user-1', plan)
    for _ in range(12):
        store.add_completion('user-1', saved.id, 4)

    assert len(store.get_recent_completions('user-1')) == 10
    assert store.get_recent_completions('user-2') == []
