"""
Recommendation lifecycle

Client-side state for the recommendations page: freshly generated plans
(ephemeral), favorites (saved) and the completion form used to rate a saved
plan after doing it. Every operation reports a single human-readable message
through `message` / `error`; lists are only changed on success.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

import recommendation_store
from errors import RecommendationError
from models import EphemeralRecommendation, Recommendation, RecommendationItem, SavedRecommendation
from recommendation_generator import generate_recommendations

LOGIN_REQUIRED = "You must be logged in to save recommendations"
RATING_REQUIRED = "Please select a rating"


@dataclass
class CompletionForm:
    """Transient form state for one completion dialog"""
    recommendation: SavedRecommendation
    rating: int = 0
    notes: str = ""
    # Positions in recommendation.plan.exercises, so repeated names stay distinct
    completed: Set[int] = field(default_factory=set)

    def completed_exercise_names(self) -> List[str]:
        exercises = self.recommendation.plan.exercises
        return [exercises[i].name for i in sorted(self.completed)]


def _default_generate(user_id) -> List[Recommendation]:
    return generate_recommendations(user_id).recommendations


class RecommendationLifecycle:
    def __init__(self, user_id=None, store=recommendation_store,
                 generate: Optional[Callable] = None):
        self.user_id = user_id
        self.store = store
        self.generate_fn = generate or _default_generate
        self.new_recommendations: List[EphemeralRecommendation] = []
        self.favorites: List[SavedRecommendation] = []
        self.completion: Optional[CompletionForm] = None
        self.message: Optional[str] = None
        self.error: Optional[str] = None

    def _fail(self, message):
        self.error = message
        self.message = None
        return False

    def _succeed(self, message):
        self.error = None
        self.message = message
        return True

    # --- generation -------------------------------------------------------

    def generate(self):
        """Replace the "new" list with a fresh batch; keep everything on failure"""
        if not self.user_id:
            return self._fail("You must be logged in to generate recommendations")

        try:
            recommendations = self.generate_fn(self.user_id)
        except RecommendationError as e:
            return self._fail(e.message)
        except Exception as e:
            print(f"Error generating recommendations: {e}")
            return self._fail("Failed to generate recommendations")

        if not recommendations:
            return self._fail("No recommendations received")

        self.new_recommendations = [EphemeralRecommendation(plan=r) for r in recommendations]
        return self._succeed("AI-powered recommendations generated!")

    # --- favorites --------------------------------------------------------

    def refresh_favorites(self):
        try:
            self.favorites = self.store.list_saved_recommendations(self.user_id)
        except Exception as e:
            print(f"Error loading saved recommendations: {e}")
            return self._fail("Failed to load saved recommendations")
        return True

    def save(self, item: RecommendationItem):
        """Persist a plan as a new favorite; duplicates are allowed"""
        if not self.user_id:
            return self._fail(LOGIN_REQUIRED)

        plan = item.plan if isinstance(item, (EphemeralRecommendation, SavedRecommendation)) else item
        try:
            self.store.save_recommendation(self.user_id, plan)
        except Exception as e:
            print(f"Error saving recommendation: {e}")
            return self._fail("Failed to save recommendation")

        if not self.refresh_favorites():
            return False
        return self._succeed("Recommendation saved to favorites")

    def remove(self, saved_id):
        """Hard delete a favorite"""
        if not self.user_id:
            return self._fail(LOGIN_REQUIRED)

        try:
            removed = self.store.delete_saved_recommendation(self.user_id, saved_id)
        except Exception as e:
            print(f"Error removing recommendation: {e}")
            return self._fail("Failed to remove recommendation")

        if not self.refresh_favorites():
            return False
        if not removed:
            return self._fail("Recommendation not found")
        return self._succeed("Recommendation removed from favorites")

    # --- completion feedback ---------------------------------------------

    def open_completion(self, saved: SavedRecommendation):
        """Start a fresh completion form; nothing carries over from the last one"""
        self.completion = CompletionForm(recommendation=saved)
        return self.completion

    def _form(self) -> CompletionForm:
        if self.completion is None:
            raise RuntimeError("No completion form is open")
        return self.completion

    def toggle_exercise_completion(self, index: int) -> Set[int]:
        form = self._form()
        if not 0 <= index < len(form.recommendation.plan.exercises):
            raise IndexError(f"No exercise at position {index}")
        form.completed ^= {index}
        return form.completed

    def set_rating(self, rating: int):
        self._form().rating = rating

    def set_notes(self, notes: str):
        self._form().notes = notes or ""

    def submit_completion(self):
        """
        Persist rating, notes and completed exercises for the open form.
        A missing rating is rejected before touching the store; a failed write
        keeps the form so the user can try again.
        """
        form = self._form()
        if isinstance(form.rating, bool) or not isinstance(form.rating, int) or not 1 <= form.rating <= 5:
            return self._fail(RATING_REQUIRED)

        try:
            self.store.add_completion(
                self.user_id,
                form.recommendation.id,
                form.rating,
                form.notes.strip() or None,
                form.completed_exercise_names(),
            )
        except Exception as e:
            print(f"Error saving completion: {e}")
            return self._fail("Failed to save workout completion")

        self.completion = None
        return self._succeed("Workout marked as completed!")
