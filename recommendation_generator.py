"""
Workout recommendation generation
Builds the prompt from history and feedback, calls Claude with a forced tool
call and validates the structured result
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import anthropic
from anthropic import Anthropic
from dotenv import load_dotenv
from pydantic import ValidationError

import recommendation_store
from errors import (
    ConfigurationError,
    InvalidResponseError,
    MissingUserIdError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamError,
)
from feedback_summary import summarize_feedback
from history import HistorySnapshot, aggregate_history
from models import Recommendation, RecommendationBatch
from usage import calculate_cost, update_usage

load_dotenv()

RECOMMENDATION_MODEL = os.getenv("RECOMMENDATION_MODEL", "claude-3-5-haiku-20241022")
RECOMMENDATION_MAX_TOKENS = int(os.getenv("RECOMMENDATION_MAX_TOKENS", "4096"))

TOOL_NAME = "generate_workout_recommendations"

SYSTEM_PROMPT = """You are an expert fitness coach. Generate 3-5 personalized workout recommendations based on the user's fitness level, goals, and workout history. Each recommendation should be specific, actionable, and progressive.

Consider:
- User's current fitness level
- Their stated goals
- Recent workout patterns and exercise types
- Feedback on previous recommendations, when provided
- Progressive overload principles
- Variety to prevent plateaus
- Recovery and balance

Provide detailed workout plans that are achievable and motivating."""

RECOMMENDATION_TOOL = {
    "name": TOOL_NAME,
    "description": "Generate personalized workout recommendations",
    "input_schema": {
        "type": "object",
        "properties": {
            "recommendations": {
                "type": "array",
                "minItems": 3,
                "maxItems": 5,
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "Catchy workout plan title"},
                        "description": {"type": "string", "description": "Brief description of the workout focus"},
                        "duration": {"type": "string", "description": "Estimated duration (e.g., '45 minutes')"},
                        "difficulty": {"type": "string", "enum": ["beginner", "intermediate", "advanced"]},
                        "exercises": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "sets": {"type": "string", "description": "Number of sets (e.g., '3' or '3-4')"},
                                    "reps": {"type": "string", "description": "Number of reps or duration (e.g., '12-15' or '30 seconds')"},
                                    "notes": {"type": "string", "description": "Additional tips or form cues"},
                                },
                                "required": ["name", "sets", "reps"],
                            },
                        },
                        "benefits": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Key benefits of this workout",
                        },
                    },
                    "required": ["title", "description", "duration", "difficulty", "exercises", "benefits"],
                },
            },
        },
        "required": ["recommendations"],
    },
}


@dataclass
class GenerationResult:
    recommendations: List[Recommendation]
    user_context: str
    usage: Dict[str, Any] = field(default_factory=dict)
    history: Optional[HistorySnapshot] = None
    feedback_summary: str = ""


def get_client():
    """Claude client; a missing key is a configuration error, not a crash at import"""
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ConfigurationError()
    return Anthropic(api_key=api_key)


def build_user_context(history: HistorySnapshot, feedback_text: str = "") -> str:
    profile = history.profile
    context = f"""
User Profile:
- Fitness Level: {profile.fitness_level}
- Goals: {profile.fitness_goals or "Not specified"}

Recent Workout History (last 10 workouts):
{history.workout_text}

Recent Exercises:
{history.exercise_text}
"""
    if feedback_text:
        context += f"\n{feedback_text}\n"
    return context


def request_recommendations(client, user_context: str):
    """Single forced tool call; upstream failures map to user-facing errors"""
    try:
        return client.messages.create(
            model=RECOMMENDATION_MODEL,
            max_tokens=RECOMMENDATION_MAX_TOKENS,
            system=SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": f"Generate workout recommendations for this user:\n\n{user_context}"}
            ],
            tools=[RECOMMENDATION_TOOL],
            tool_choice={"type": "tool", "name": TOOL_NAME},
        )
    except anthropic.RateLimitError as e:
        print(f"AI gateway error: 429 {e}")
        raise RateLimitedError() from e
    except anthropic.APIStatusError as e:
        print(f"AI gateway error: {e.status_code} {e}")
        if e.status_code == 402:
            raise QuotaExhaustedError() from e
        raise UpstreamError() from e
    except anthropic.APIError as e:
        print(f"AI gateway error: {e}")
        raise UpstreamError() from e


def parse_recommendations(message) -> List[Recommendation]:
    """
    Pull the forced tool call out of the response and validate it.
    Anything short of a complete, schema-valid payload is rejected outright.
    """
    tool_call = None
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == TOOL_NAME:
            tool_call = block
            break

    if tool_call is None:
        print(f"No tool call in response: {message}")
        raise InvalidResponseError()

    arguments = tool_call.input
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except ValueError as e:
            print(f"Unparsable tool arguments: {e}")
            raise InvalidResponseError() from e

    try:
        batch = RecommendationBatch.model_validate(arguments)
    except ValidationError as e:
        print(f"Tool arguments failed validation: {e}")
        raise InvalidResponseError() from e

    return batch.recommendations


def generate_recommendations(user_id, client=None) -> GenerationResult:
    """
    Generate recommendations for a user.

    Order of checks: user id, credential, profile (required), workout and
    exercise history (optional), feedback history (optional), model call.
    Nothing is retried.
    """
    if not user_id:
        raise MissingUserIdError()

    if client is None:
        client = get_client()

    history = aggregate_history(user_id)

    try:
        completions = recommendation_store.get_recent_completions(user_id)
    except Exception as e:
        print(f"Feedback fetch error: {e}")
        completions = []
    feedback_text = summarize_feedback(completions)

    user_context = build_user_context(history, feedback_text)
    message = request_recommendations(client, user_context)
    recommendations = parse_recommendations(message)

    usage = {}
    message_usage = getattr(message, "usage", None)
    if message_usage is not None:
        input_tokens = message_usage.input_tokens
        output_tokens = message_usage.output_tokens
        usage = {
            'input_tokens': input_tokens,
            'output_tokens': output_tokens,
            'cost': calculate_cost(input_tokens, output_tokens),
        }
        try:
            update_usage(user_id, input_tokens, output_tokens)
        except Exception as e:
            print(f"Error updating usage in database: {e}")

    return GenerationResult(
        recommendations=recommendations,
        user_context=user_context,
        usage=usage,
        history=history,
        feedback_summary=feedback_text,
    )
