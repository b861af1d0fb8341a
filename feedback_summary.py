"""
Feedback summarizer
Turns past completion feedback into statistics and a short directive block
that steers the next round of recommendations
"""

from dataclasses import dataclass, field
from typing import List

from models import CompletionFeedback

HIGH_RATING = 4
LOW_RATING = 2
MAX_HIGH_RATED_LISTED = 3
MAX_LOW_RATED_LISTED = 2

UNKNOWN_TITLE = "Unknown"


@dataclass
class FeedbackStats:
    count: int = 0
    average_rating: float = 0.0
    high_rated: List[CompletionFeedback] = field(default_factory=list)
    low_rated: List[CompletionFeedback] = field(default_factory=list)

    def to_dict(self):
        return {
            'count': self.count,
            'average_rating': self.average_rating,
            'high_rated': len(self.high_rated),
            'low_rated': len(self.low_rated),
        }


def feedback_title(feedback: CompletionFeedback) -> str:
    if feedback.recommendation is None:
        return UNKNOWN_TITLE
    return feedback.recommendation.plan.title


def feedback_difficulty(feedback: CompletionFeedback) -> str:
    if feedback.recommendation is None:
        return "unknown difficulty"
    return feedback.recommendation.plan.difficulty


def compute_feedback_stats(feedback: List[CompletionFeedback]) -> FeedbackStats:
    """Average rating plus the high (>=4) and low (<=2) rated subsets"""
    if not feedback:
        return FeedbackStats()

    return FeedbackStats(
        count=len(feedback),
        average_rating=sum(f.rating for f in feedback) / len(feedback),
        high_rated=[f for f in feedback if f.rating >= HIGH_RATING],
        low_rated=[f for f in feedback if f.rating <= LOW_RATING],
    )


def summarize_feedback(feedback: List[CompletionFeedback]) -> str:
    """
    Build the feedback section of the prompt.

    Lists up to 3 high-rated workouts (title and difficulty) to repeat and up
    to 2 low-rated workouts (title and notes) to avoid. Returns an empty
    string when there is no feedback at all.
    """
    stats = compute_feedback_stats(feedback)
    if stats.count == 0:
        return ""

    lines = [
        "Feedback From Previous Recommendations:",
        f"- Average rating: {stats.average_rating:.1f}/5 across {stats.count} completed workout(s)",
    ]

    if stats.high_rated:
        lines.append(f"- Highly rated workouts ({len(stats.high_rated)}):")
        for f in stats.high_rated[:MAX_HIGH_RATED_LISTED]:
            line = f"  * {feedback_title(f)} ({feedback_difficulty(f)}) - rated {f.rating}/5"
            if f.completed_exercises:
                line += f", completed: {', '.join(f.completed_exercises)}"
            lines.append(line)

    if stats.low_rated:
        lines.append(f"- Poorly rated workouts ({len(stats.low_rated)}):")
        for f in stats.low_rated[:MAX_LOW_RATED_LISTED]:
            line = f"  * {feedback_title(f)} - rated {f.rating}/5"
            if f.notes:
                line += f". Notes: {f.notes}"
            lines.append(line)

    if stats.high_rated:
        lines.append("Create workouts similar in structure, exercise selection and intensity to the highly rated ones.")
    if stats.low_rated:
        lines.append("Avoid the patterns, exercises and intensity of the poorly rated ones.")

    return "\n".join(lines)
