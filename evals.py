#!/usr/bin/env python3
"""
Evals for Workout Recommendations
Lightweight checks on a generated batch of recommendations
"""

from typing import Any, Dict, List, Optional

from feedback_summary import compute_feedback_stats, feedback_title
from models import FITNESS_LEVELS, CompletionFeedback, Recommendation

MIN_RECOMMENDATIONS = 3
MAX_RECOMMENDATIONS = 5


def eval_recommendation_count(recommendations: List[Recommendation]) -> Dict[str, Any]:
    """The model is asked for 3-5 plans"""
    count = len(recommendations)
    results = {
        'passed': MIN_RECOMMENDATIONS <= count <= MAX_RECOMMENDATIONS,
        'count': count,
        'issues': [],
        'score': 0,
        'max_score': 1
    }
    if results['passed']:
        results['score'] = 1
    else:
        results['issues'].append(f"Got {count} recommendations (should be {MIN_RECOMMENDATIONS}-{MAX_RECOMMENDATIONS})")

    results['score_pct'] = (results['score'] / results['max_score']) * 100
    return results


def eval_plan_detail(recommendations: List[Recommendation]) -> Dict[str, Any]:
    """
    Every plan should be usable on its own:
    - at least 3 exercises
    - at least one benefit
    - a non-empty description
    """
    results = {
        'passed': True,
        'issues': [],
        'score': 0,
        'max_score': max(len(recommendations), 1)
    }

    for rec in recommendations:
        plan_issues = []
        if len(rec.exercises) < 3:
            plan_issues.append(f"'{rec.title}' has only {len(rec.exercises)} exercise(s)")
        if not rec.benefits:
            plan_issues.append(f"'{rec.title}' lists no benefits")
        if not rec.description.strip():
            plan_issues.append(f"'{rec.title}' has no description")

        if plan_issues:
            results['issues'].extend(plan_issues)
        else:
            results['score'] += 1

    results['passed'] = bool(recommendations) and not results['issues']
    results['score_pct'] = (results['score'] / results['max_score']) * 100
    return results


def eval_difficulty_fit(recommendations: List[Recommendation], fitness_level: Optional[str] = None) -> Dict[str, Any]:
    """Difficulty should be within one step of the user's fitness level"""
    results = {
        'passed': True,
        'issues': [],
        'score': 0,
        'max_score': max(len(recommendations), 1)
    }

    if fitness_level not in FITNESS_LEVELS:
        # Nothing to compare against
        results['score'] = results['max_score']
        results['score_pct'] = 100.0
        return results

    level = FITNESS_LEVELS.index(fitness_level)
    for rec in recommendations:
        if abs(FITNESS_LEVELS.index(rec.difficulty) - level) <= 1:
            results['score'] += 1
        else:
            results['issues'].append(f"'{rec.title}' is {rec.difficulty} for a {fitness_level} user")

    results['passed'] = not results['issues']
    results['score_pct'] = (results['score'] / results['max_score']) * 100
    return results


def eval_feedback_adherence(recommendations: List[Recommendation],
                            feedback: Optional[List[CompletionFeedback]] = None) -> Dict[str, Any]:
    """Poorly rated workouts should not come back under the same title"""
    results = {
        'passed': True,
        'issues': [],
        'score': 1,
        'max_score': 1
    }

    stats = compute_feedback_stats(feedback or [])
    avoided = {feedback_title(f).strip().lower() for f in stats.low_rated if f.recommendation is not None}
    repeated = [rec.title for rec in recommendations if rec.title.strip().lower() in avoided]
    if repeated:
        results['passed'] = False
        results['score'] = 0
        results['issues'].append(f"Repeats poorly rated workout(s): {', '.join(repeated)}")

    results['score_pct'] = (results['score'] / results['max_score']) * 100
    return results


def run_evals(recommendations: List[Recommendation], fitness_level: Optional[str] = None,
              feedback: Optional[List[CompletionFeedback]] = None) -> Dict[str, Any]:
    """
    Run all evals on a batch of recommendations and return results
    """
    results = {
        'count': eval_recommendation_count(recommendations),
        'detail': eval_plan_detail(recommendations),
        'difficulty': eval_difficulty_fit(recommendations, fitness_level),
        'feedback': eval_feedback_adherence(recommendations, feedback),
        'overall_score': 0,
        'overall_passed': False
    }

    weights = {'count': 0.2, 'detail': 0.3, 'difficulty': 0.3, 'feedback': 0.2}
    results['overall_score'] = sum(results[name]['score_pct'] * weight for name, weight in weights.items())

    # Repeating a workout the user disliked fails the batch regardless of score
    results['overall_passed'] = results['overall_score'] >= 70 and results['feedback']['passed']

    return results


def print_eval_results(results: Dict[str, Any]):
    """
    Pretty print eval results
    """
    print("\n" + "="*50)
    print("EVAL RESULTS")
    print("="*50)

    labels = {
        'count': '🔢 Count',
        'detail': '📋 Plan Detail',
        'difficulty': '📈 Difficulty Fit',
        'feedback': '💬 Feedback Adherence',
    }
    for name, label in labels.items():
        section = results[name]
        print(f"\n{label}: {section['score']}/{section['max_score']} ({section['score_pct']:.0f}%)")
        for issue in section['issues']:
            print(f"   - {issue}")

    print(f"\n🎯 Overall Score: {results['overall_score']:.1f}%")
    if results['overall_passed']:
        print("   ✅ PASSED")
    else:
        print("   ❌ FAILED")

    print("="*50 + "\n")


if __name__ == '__main__':
    # Example usage
    sample = [
        Recommendation(
            title="Full Body Foundations",
            description="Compound movements to build a base",
            duration="40 minutes",
            difficulty="beginner",
            exercises=[
                {"name": "Goblet Squat", "sets": "3", "reps": "10"},
                {"name": "Push-up", "sets": "3", "reps": "8-10"},
                {"name": "Dumbbell Row", "sets": "3", "reps": "10"},
            ],
            benefits=["Builds general strength"],
        ),
    ]
    print_eval_results(run_evals(sample, fitness_level="beginner"))
