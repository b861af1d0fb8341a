"""
Database module for the workout recommendation service
Handles PostgreSQL and SQLite connections and schema
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

# Try to import psycopg2 for PostgreSQL support
try:
    import psycopg2
    HAS_POSTGRES = True
except ImportError:
    HAS_POSTGRES = False

def get_db_url():
    """Get database URL from environment variable"""
    db_url = os.getenv('DATABASE_URL') or os.getenv('POSTGRES_URL')
    if not db_url:
        # Fallback to SQLite for local development
        return 'sqlite:///fitness_coach.db'
    return db_url

def is_sqlite(db_url):
    """Check if database URL is SQLite"""
    return bool(db_url) and db_url.startswith('sqlite:///')

def adapt_query(query):
    """Queries are written with ? placeholders; PostgreSQL wants %s"""
    if is_sqlite(get_db_url()):
        return query
    return query.replace('?', '%s')

def get_cursor(conn):
    """Get a cursor from connection - sqlite3 and psycopg2 cursors share execute/fetch"""
    return conn.cursor()

def insert_returning_id(cur, query, params):
    """Run an INSERT and return the new row id"""
    if is_sqlite(get_db_url()):
        cur.execute(query, params)
        return cur.lastrowid
    cur.execute(adapt_query(query) + " RETURNING id", params)
    return cur.fetchone()[0]

@contextmanager
def get_db_connection():
    """Get a database connection with automatic cleanup"""
    db_url = get_db_url()

    if is_sqlite(db_url):
        db_path = db_url.replace('sqlite:///', '')
        # Make path absolute
        if not os.path.isabs(db_path):
            db_path = str(Path(__file__).parent / db_path)
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row  # Enable column access by name
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
    else:
        if not HAS_POSTGRES:
            raise ValueError("PostgreSQL URL provided but psycopg2 not installed. Install with: pip install psycopg2-binary")

        # Handle Railway's postgres:// URL format (convert to postgresql://)
        if db_url.startswith('postgres://'):
            db_url = db_url.replace('postgres://', 'postgresql://', 1)

        conn = psycopg2.connect(db_url)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

def _id_column(use_sqlite):
    return "INTEGER PRIMARY KEY AUTOINCREMENT" if use_sqlite else "SERIAL PRIMARY KEY"

def init_db():
    """Initialize database tables - works with both PostgreSQL and SQLite"""
    use_sqlite = is_sqlite(get_db_url())
    id_column = _id_column(use_sqlite)

    with get_db_connection() as conn:
        cur = get_cursor(conn)

        # Profiles are owned by the auth layer; the id is the user id
        cur.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                username TEXT,
                fitness_level TEXT NOT NULL DEFAULT 'beginner',
                fitness_goals TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cur.execute(f"""
            CREATE TABLE IF NOT EXISTS workouts (
                id {id_column},
                user_id TEXT NOT NULL,
                workout_date TEXT NOT NULL,
                total_duration INTEGER DEFAULT 0,
                total_calories INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_user_date ON workouts(user_id, workout_date)
        """)

        cur.execute(f"""
            CREATE TABLE IF NOT EXISTS exercises (
                id {id_column},
                workout_id INTEGER REFERENCES workouts(id) ON DELETE CASCADE,
                type TEXT,
                name TEXT NOT NULL,
                sets INTEGER,
                reps INTEGER,
                duration INTEGER,
                weight REAL
            )
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercises_workout_id ON exercises(workout_id)
        """)

        # exercises and benefits are JSON-encoded lists
        cur.execute(f"""
            CREATE TABLE IF NOT EXISTS saved_recommendations (
                id {id_column},
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                duration TEXT NOT NULL,
                difficulty TEXT NOT NULL,
                exercises TEXT NOT NULL,
                benefits TEXT NOT NULL,
                saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_saved_recommendations_user_id ON saved_recommendations(user_id)
        """)

        # recommendation_id has no FK constraint: completions outlive deleted favorites
        cur.execute(f"""
            CREATE TABLE IF NOT EXISTS recommendation_completions (
                id {id_column},
                user_id TEXT NOT NULL,
                recommendation_id INTEGER NOT NULL,
                rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
                notes TEXT,
                completed_exercises TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_completions_user_id ON recommendation_completions(user_id)
        """)

        # Usage tracking table
        cur.execute(f"""
            CREATE TABLE IF NOT EXISTS usage (
                id {id_column},
                user_id TEXT NOT NULL,
                date DATE NOT NULL,
                input_tokens INTEGER DEFAULT 0,
                output_tokens INTEGER DEFAULT 0,
                cost DECIMAL(10, 6) DEFAULT 0.0,
                requests INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(user_id, date)
            )
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_usage_user_id ON usage(user_id)
        """)

    print("Database tables initialized successfully")

def check_db_connection():
    """Check if database connection works"""
    try:
        with get_db_connection() as conn:
            cur = get_cursor(conn)
            cur.execute("SELECT 1")
            return True
    except Exception as e:
        print(f"Database connection failed: {e}")
        return False
