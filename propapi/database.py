"""
Database operations and connection management for the property index.
"""
import sqlite3
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from propscraper.database import db_connect, db_init

from .config import config

logger = logging.getLogger(__name__)

SEARCHABLE_COLUMNS = ["address", "description", "city", "state", "property_type"]


@contextmanager
def get_db_connection():
    """Get a database connection with the schema in place."""
    conn = None
    try:
        if not config.DB_PATH:
            raise ValueError("Database path not configured")

        conn = db_connect(config.DB_PATH)
        db_init(conn)
        yield conn
    except sqlite3.Error as e:
        logger.error(f"Database error: {e}")
        raise
    finally:
        if conn is not None:
            conn.close()


def build_where_clause(filters: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """Build WHERE clause and parameters from filters."""
    where_conditions = []
    parameters = []

    # Text search: every word must appear in some searchable column
    q = filters.get('q')
    if q:
        for word in q.lower().split():
            like = ' OR '.join(f'lower({col}) LIKE ?' for col in SEARCHABLE_COLUMNS)
            where_conditions.append(f'({like})')
            parameters.extend([f'%{word}%'] * len(SEARCHABLE_COLUMNS))

    for column in ('city', 'state'):
        value = filters.get(column)
        if value:
            where_conditions.append(f'lower({column}) = ?')
            parameters.append(value.strip().lower())

    for column in ('price_range', 'property_type'):
        value = filters.get(column)
        if value:
            where_conditions.append(f'{column} = ?')
            parameters.append(value)

    beds = filters.get('beds')
    if beds is not None:
        where_conditions.append('beds = ?')
        parameters.append(beds)

    # Price range
    min_price = filters.get('min_price')
    if min_price is not None:
        where_conditions.append('(price_value IS NOT NULL AND price_value >= ?)')
        parameters.append(min_price)

    max_price = filters.get('max_price')
    if max_price is not None:
        where_conditions.append('(price_value IS NOT NULL AND price_value <= ?)')
        parameters.append(max_price)

    where_clause = ' WHERE ' + ' AND '.join(where_conditions) if where_conditions else ''
    return where_clause, parameters


def get_order_clause(sort: str) -> str:
    """Generate ORDER BY clause based on sort parameter."""
    sort_options = {
        "price_asc": "ORDER BY price_value ASC",
        "price_desc": "ORDER BY price_value DESC",
        "beds_desc": "ORDER BY beds DESC",
        "sqft_desc": "ORDER BY sqft DESC",
        "collected_desc": "ORDER BY collected_at DESC"
    }
    return sort_options.get(sort, sort_options["collected_desc"])


def _rows(cursor) -> List[Dict]:
    columns = [description[0] for description in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


def count_properties(filters: Dict[str, Any]) -> int:
    """Get total count of properties matching filters."""
    with get_db_connection() as conn:
        where_clause, parameters = build_where_clause(filters)
        result = conn.execute(f'SELECT COUNT(*) FROM properties {where_clause}', parameters).fetchone()
        return result[0] if result else 0


def search_properties(filters: Dict[str, Any], sort: str = 'collected_desc',
                      limit: int = 50, offset: int = 0) -> List[Dict]:
    """Get properties with filters, sorting, and pagination."""
    with get_db_connection() as conn:
        where_clause, parameters = build_where_clause(filters)
        order_clause = get_order_clause(sort)

        sql = f'SELECT * FROM properties {where_clause} {order_clause} LIMIT ? OFFSET ?'
        parameters.extend([limit, offset])
        return _rows(conn.execute(sql, parameters))


def get_property_by_id(object_id: str) -> Optional[Dict]:
    """Get a single property by ID."""
    with get_db_connection() as conn:
        rows = _rows(conn.execute('SELECT * FROM properties WHERE object_id = ?', (object_id,)))
        return rows[0] if rows else None


def get_statistics() -> Dict[str, Any]:
    """Aggregate figures over the whole index."""
    with get_db_connection() as conn:
        total = conn.execute('SELECT COUNT(*) FROM properties').fetchone()[0]
        unique_cities = conn.execute(
            "SELECT COUNT(DISTINCT lower(city) || ', ' || lower(state)) FROM properties"
        ).fetchone()[0]
        avg_price = conn.execute(
            'SELECT AVG(price_value) FROM properties WHERE price_value > 0'
        ).fetchone()[0]

        price_ranges = conn.execute(
            "SELECT COALESCE(NULLIF(price_range, ''), 'Unknown'), COUNT(*) FROM properties GROUP BY 1 ORDER BY 2 DESC"
        ).fetchall()
        property_types = conn.execute(
            "SELECT COALESCE(NULLIF(property_type, ''), 'Unknown'), COUNT(*) FROM properties GROUP BY 1 ORDER BY 2 DESC"
        ).fetchall()

        return {
            'total_properties': total,
            'unique_cities': unique_cities,
            'average_price': int(round(avg_price)) if avg_price else 0,
            'price_ranges': {label: count for label, count in price_ranges},
            'property_types': {label: count for label, count in property_types}
        }
