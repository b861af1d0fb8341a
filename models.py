"""
Data types for workout recommendations

Recommendation shapes coming back from the model are validated strictly with
pydantic: a wrong type or an unknown difficulty rejects the whole payload.
Stored rows (profiles, workouts, favorites, completion feedback) are plain
dataclasses.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictStr

Difficulty = Literal['beginner', 'intermediate', 'advanced']
FITNESS_LEVELS = ('beginner', 'intermediate', 'advanced')


class Exercise(BaseModel):
    name: StrictStr
    sets: StrictStr
    reps: StrictStr
    notes: Optional[StrictStr] = None


class Recommendation(BaseModel):
    title: StrictStr
    description: StrictStr
    duration: StrictStr
    difficulty: Difficulty
    exercises: List[Exercise]
    benefits: List[StrictStr]


class RecommendationBatch(BaseModel):
    """Arguments of the generate_workout_recommendations tool call"""
    recommendations: List[Recommendation] = Field(min_length=3, max_length=5)


@dataclass
class Profile:
    id: str
    fitness_level: str
    fitness_goals: Optional[str] = None
    username: Optional[str] = None


@dataclass
class WorkoutRecord:
    id: int
    workout_date: str
    total_duration: Optional[int]
    total_calories: Optional[int]


@dataclass
class ExerciseRecord:
    workout_id: int
    type: Optional[str]
    name: str
    sets: Optional[int] = None
    reps: Optional[int] = None
    duration: Optional[int] = None
    weight: Optional[float] = None


@dataclass
class EphemeralRecommendation:
    """Generated but not persisted; lost on the next generate()"""
    plan: Recommendation
    state: Literal['ephemeral'] = 'ephemeral'

    def to_dict(self):
        return {'state': self.state, **self.plan.model_dump(exclude_none=True)}


@dataclass
class SavedRecommendation:
    """A favorited recommendation; immutable once saved"""
    id: int
    plan: Recommendation
    saved_at: str
    state: Literal['saved'] = 'saved'

    @property
    def title(self):
        return self.plan.title

    def to_dict(self):
        return {
            'id': self.id,
            'saved_at': self.saved_at,
            'state': self.state,
            **self.plan.model_dump(exclude_none=True),
        }


RecommendationItem = Union[EphemeralRecommendation, SavedRecommendation]


@dataclass
class CompletionFeedback:
    id: int
    recommendation_id: int
    rating: int
    notes: Optional[str]
    completed_exercises: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    # None when the favorite this feedback refers to has been removed
    recommendation: Optional[SavedRecommendation] = None

    def to_dict(self):
        return {
            'id': self.id,
            'recommendation_id': self.recommendation_id,
            'rating': self.rating,
            'notes': self.notes,
            'completed_exercises': list(self.completed_exercises),
            'created_at': self.created_at,
            'recommendation': self.recommendation.to_dict() if self.recommendation else None,
        }
