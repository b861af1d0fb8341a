"""
Token usage and cost tracking for model calls
"""

import os
from datetime import datetime

from dotenv import load_dotenv

from database import adapt_query, get_cursor, get_db_connection, get_db_url, is_sqlite

load_dotenv()

# Claude Haiku pricing (per 1M tokens)
INPUT_COST_PER_MILLION = float(os.getenv("INPUT_COST_PER_MILLION", "0.80"))
OUTPUT_COST_PER_MILLION = float(os.getenv("OUTPUT_COST_PER_MILLION", "4.00"))


def calculate_cost(input_tokens, output_tokens):
    """Calculate cost in dollars"""
    input_cost = (input_tokens / 1_000_000) * INPUT_COST_PER_MILLION
    output_cost = (output_tokens / 1_000_000) * OUTPUT_COST_PER_MILLION
    return input_cost + output_cost


def update_usage(user_id, input_tokens, output_tokens):
    """Add one request's tokens and cost to today's row for the user"""
    today = datetime.now().date().isoformat()
    cost = calculate_cost(input_tokens, output_tokens)

    with get_db_connection() as conn:
        cur = get_cursor(conn)
        if is_sqlite(get_db_url()):
            # SQLite: Check if exists, then update or insert
            cur.execute("""
                SELECT requests FROM usage WHERE user_id = ? AND date = ?
            """, (str(user_id), today))
            if cur.fetchone():
                cur.execute("""
                    UPDATE usage
                    SET input_tokens = input_tokens + ?,
                        output_tokens = output_tokens + ?,
                        cost = cost + ?,
                        requests = requests + 1,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE user_id = ? AND date = ?
                """, (input_tokens, output_tokens, cost, str(user_id), today))
            else:
                cur.execute("""
                    INSERT INTO usage (date, input_tokens, output_tokens, cost, requests, user_id)
                    VALUES (?, ?, ?, ?, 1, ?)
                """, (today, input_tokens, output_tokens, cost, str(user_id)))
        else:
            cur.execute("""
                INSERT INTO usage (date, input_tokens, output_tokens, cost, requests, user_id)
                VALUES (%s, %s, %s, %s, 1, %s)
                ON CONFLICT (user_id, date)
                DO UPDATE SET
                    input_tokens = usage.input_tokens + %s,
                    output_tokens = usage.output_tokens + %s,
                    cost = usage.cost + %s,
                    requests = usage.requests + 1,
                    updated_at = CURRENT_TIMESTAMP
            """, (today, input_tokens, output_tokens, cost, str(user_id), input_tokens, output_tokens, cost))

    return cost


def load_usage(user_id):
    """Today's and all-time usage for a user"""
    today = datetime.now().date().isoformat()
    empty = {"input_tokens": 0, "output_tokens": 0, "cost": 0.0, "requests": 0}

    with get_db_connection() as conn:
        cur = get_cursor(conn)
        cur.execute(adapt_query("""
            SELECT date, input_tokens, output_tokens, cost, requests
            FROM usage
            WHERE user_id = ?
            ORDER BY date DESC
        """), (str(user_id),))
        rows = cur.fetchall()

    usage = {"today": dict(empty), "total": dict(empty), "recent_days": {}}
    for row in rows:
        day = {
            "input_tokens": row[1] or 0,
            "output_tokens": row[2] or 0,
            "cost": float(row[3] or 0),
            "requests": row[4] or 0,
        }
        day_key = str(row[0])
        if day_key == today:
            usage["today"] = day
        if len(usage["recent_days"]) < 7:
            usage["recent_days"][day_key] = day
        for key in empty:
            usage["total"][key] += day[key]
    return usage
