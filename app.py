#!/usr/bin/env python3
"""
AI Workout Recommendations
Generates personalized workout plans and tracks how users rate them
"""

import os
import secrets
from datetime import timedelta
from functools import wraps

from dotenv import load_dotenv
from flask import Flask, jsonify, request, session
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.middleware.proxy_fix import ProxyFix

import recommendation_store
from database import check_db_connection, init_db
from errors import RecommendationError
from evals import run_evals
from feedback_summary import compute_feedback_stats
from models import Recommendation
from recommendation_generator import generate_recommendations
from usage import load_usage

load_dotenv()

app = Flask(__name__)
# Detect production environment (Railway sets DATABASE_URL, or we check for Railway env vars)
is_production_env = (
    os.getenv('DATABASE_URL') is not None and 'postgres' in os.getenv('DATABASE_URL', '').lower()
) or os.getenv('RAILWAY_ENVIRONMENT') is not None or os.getenv('RAILWAY') is not None or os.getenv('SECRET_KEY') is not None

# Trust Railway's proxy headers for HTTPS detection
if is_production_env:
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)
# IMPORTANT: Set SECRET_KEY in the environment for session persistence
app.secret_key = os.getenv('SECRET_KEY', secrets.token_hex(32))
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=365)
is_production = is_production_env or os.getenv('FLASK_ENV') == 'production'
app.config['SESSION_COOKIE_SECURE'] = is_production
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

# Browser clients call the generation function directly from any origin
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS(app, origins="*", send_wildcard=True, allow_headers=CORS_ALLOW_HEADERS)

# Initialize database on startup
try:
    if check_db_connection():
        init_db()
        print("✓ Database initialized")
    else:
        print("⚠ Database not available")
except Exception as e:
    print(f"⚠ Database initialization failed: {e}")

RUN_EVALS = os.getenv("RUN_EVALS", "false").lower() == "true"

# ============================================================================
# Authentication Helper Functions
# ============================================================================

def get_current_user_id():
    """User id placed in the session by the auth layer"""
    user_id = session.get('user_id')
    if user_id is None:
        return None
    user_id = str(user_id).strip()
    return user_id or None

def require_auth(f):
    """Decorator to require authentication for routes"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_current_user_id():
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function

def error_response(error: RecommendationError):
    return jsonify({'error': error.message}), error.status_code

def generation_response(user_id):
    """Shared body of both generation endpoints"""
    try:
        result = generate_recommendations(user_id)
    except RecommendationError as e:
        return error_response(e)
    except Exception as e:
        print(f"Error in generate-workout-recommendations: {e}")
        import traceback
        traceback.print_exc()
        return jsonify({'error': 'Failed to generate recommendations'}), 500

    response = {
        'recommendations': [r.model_dump(exclude_none=True) for r in result.recommendations],
    }

    # Evals are optional, don't fail the request if they don't work
    if RUN_EVALS:
        try:
            eval_results = run_evals(
                result.recommendations,
                fitness_level=result.history.profile.fitness_level if result.history else None,
                feedback=recommendation_store.get_recent_completions(user_id),
            )
            response['evals'] = {
                'overall_score': eval_results['overall_score'],
                'passed': eval_results['overall_passed']
            }
        except Exception as e:
            print(f"Error running evals: {e}")

    return jsonify(response)

# ============================================================================
# Routes
# ============================================================================

@app.route('/functions/generate-workout-recommendations', methods=['POST'])
def generate_workout_recommendations():
    """Serverless-style entry point: {userId} -> {recommendations}"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return generation_response(data.get('userId'))

@app.route('/api/recommendations/generate', methods=['POST'])
@require_auth
def generate_for_current_user():
    return generation_response(get_current_user_id())

@app.route('/api/saved-recommendations', methods=['GET'])
@require_auth
def get_saved_recommendations():
    """Favorites for the current user, newest first"""
    try:
        saved = recommendation_store.list_saved_recommendations(get_current_user_id())
    except Exception as e:
        print(f"Error loading saved recommendations: {e}")
        return jsonify({'error': 'Failed to load saved recommendations'}), 500
    return jsonify({'recommendations': [s.to_dict() for s in saved]})

@app.route('/api/saved-recommendations', methods=['POST'])
@require_auth
def save_recommendation():
    """Save a generated recommendation as a favorite"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    try:
        plan = Recommendation.model_validate(data.get('recommendation', data))
    except ValidationError:
        return jsonify({'error': 'Invalid recommendation'}), 400

    try:
        saved = recommendation_store.save_recommendation(get_current_user_id(), plan)
    except Exception as e:
        print(f"Error saving recommendation: {e}")
        return jsonify({'error': 'Failed to save recommendation'}), 500

    return jsonify({'success': True, 'recommendation': saved.to_dict()}), 201

@app.route('/api/saved-recommendations/<int:saved_id>', methods=['DELETE'])
@require_auth
def delete_saved_recommendation(saved_id):
    """Remove a favorite - there is no undo"""
    try:
        removed = recommendation_store.delete_saved_recommendation(get_current_user_id(), saved_id)
    except Exception as e:
        print(f"Error removing recommendation: {e}")
        return jsonify({'error': 'Failed to remove recommendation'}), 500

    if not removed:
        return jsonify({'error': 'Recommendation not found'}), 404
    return jsonify({'success': True})

@app.route('/api/saved-recommendations/<int:saved_id>/completions', methods=['POST'])
@require_auth
def complete_saved_recommendation(saved_id):
    """Record that the user did a saved workout, with a 1-5 rating"""
    user_id = get_current_user_id()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    rating = data.get('rating')
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        return jsonify({'error': 'Please select a rating'}), 400

    notes = data.get('notes')
    if notes is not None and not isinstance(notes, str):
        return jsonify({'error': 'notes must be a string'}), 400
    notes = (notes or '').strip() or None
    completed = data.get('completedExercises') or []
    if not isinstance(completed, list) or not all(isinstance(name, str) for name in completed):
        return jsonify({'error': 'completedExercises must be a list of exercise names'}), 400

    try:
        if recommendation_store.get_saved_recommendation(user_id, saved_id) is None:
            return jsonify({'error': 'Recommendation not found'}), 404
        completion = recommendation_store.add_completion(user_id, saved_id, rating, notes, completed)
    except Exception as e:
        print(f"Error saving completion: {e}")
        return jsonify({'error': 'Failed to save workout completion'}), 500

    return jsonify({'success': True, 'completion': completion.to_dict()}), 201

@app.route('/api/completions', methods=['GET'])
@require_auth
def get_completions():
    """Recent completion feedback with rating stats"""
    try:
        completions = recommendation_store.get_recent_completions(get_current_user_id())
    except Exception as e:
        print(f"Error loading completions: {e}")
        return jsonify({'error': 'Failed to load completions'}), 500

    return jsonify({
        'completions': [c.to_dict() for c in completions],
        'stats': compute_feedback_stats(completions).to_dict(),
    })

@app.route('/api/usage', methods=['GET'])
@require_auth
def get_usage():
    """Get usage statistics"""
    try:
        usage = load_usage(get_current_user_id())
    except Exception as e:
        print(f"Error loading usage from database: {e}")
        return jsonify({'error': 'Failed to load usage'}), 500
    return jsonify({'success': True, **usage})

@app.route('/api/health', methods=['GET'])
def health():
    ok = check_db_connection()
    return jsonify({'database': ok}), (200 if ok else 503)

if __name__ == '__main__':
    print("\n" + "="*50)
    print("AI Workout Recommendations")
    print("="*50)
    print("Starting server on http://localhost:5001")
    print("Press Ctrl+C to stop\n")
    app.run(debug=True, host='0.0.0.0', port=5001)
