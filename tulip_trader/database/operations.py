"""Database operations for the rankings."""

import json
from typing import List, Optional, Dict, Any
from sqlalchemy import create_engine, desc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from tulip_trader.database.models import Base, GameResult
from tulip_trader.config import get_config

_engines: Dict[str, Engine] = {}


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Get (and cache) the database engine for a URL, defaulting to DATABASE_URL."""
    url = database_url or get_config().database_url
    if url not in _engines:
        _engines[url] = create_engine(url)
    return _engines[url]


def get_session(database_url: Optional[str] = None) -> Session:
    """Get database session."""
    engine = get_engine(database_url)
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal()


def init_database(database_url: Optional[str] = None):
    """Initialize database tables."""
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)


def _to_dict(result: GameResult, include_summary: bool = False) -> Dict[str, Any]:
    data = {
        "id": result.id,
        "game_id": result.game_id,
        "playthrough": result.playthrough,
        "player_name": result.player_name,
        "role": result.role,
        "created_at": result.created_at.isoformat() if result.created_at else None,
        "final_coins": result.final_coins,
        "final_day": result.final_day,
        "is_win": result.is_win,
        "end_reason": result.end_reason,
        "reputation": result.reputation,
        "peak_price": result.peak_price
    }
    if include_summary:
        data["summary"] = json.loads(result.summary_json)
    return data


def save_game_result(
    game_id: str,
    player_name: str,
    summary: Dict[str, Any],
    database_url: Optional[str] = None
) -> int:
    """
    Save a finished game to the rankings.

    Args:
        game_id: Engine game id
        player_name: Name shown on the leaderboard
        summary: GameEngine.summary() of a finished game
        database_url: Override of DATABASE_URL

    Returns:
        Result ID
    """
    session = get_session(database_url)

    try:
        result = GameResult(
            game_id=game_id,
            playthrough=summary.get("playthrough", 1),
            player_name=player_name,
            role=summary["role"],
            final_coins=summary["final_coins"],
            final_day=summary["days_played"],
            is_win=summary["is_win"],
            end_reason=summary.get("end_reason"),
            reputation=summary.get("reputation"),
            peak_price=summary.get("peak_price"),
            summary_json=json.dumps(summary, default=str)
        )

        session.add(result)
        session.commit()

        return result.id

    except Exception:
        session.rollback()
        raise

    finally:
        session.close()


def get_game_result(result_id: int, database_url: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Get a stored result by ID.

    Args:
        result_id: Result ID
        database_url: Override of DATABASE_URL

    Returns:
        Result data or None if not found
    """
    session = get_session(database_url)

    try:
        result = session.query(GameResult).filter(GameResult.id == result_id).first()
        if not result:
            return None
        return _to_dict(result, include_summary=True)

    finally:
        session.close()


def list_rankings(
    limit: int = 50,
    offset: int = 0,
    database_url: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    List results ordered by final coins, richest first.

    Args:
        limit: Maximum number of results
        offset: Offset for pagination
        database_url: Override of DATABASE_URL

    Returns:
        Leaderboard entries with their rank
    """
    session = get_session(database_url)

    try:
        results = (
            session.query(GameResult)
            .order_by(desc(GameResult.final_coins), GameResult.created_at, GameResult.id)
            .limit(limit)
            .offset(offset)
            .all()
        )

        rankings = []
        for position, result in enumerate(results, start=offset + 1):
            entry = _to_dict(result)
            entry["rank"] = position
            rankings.append(entry)
        return rankings

    finally:
        session.close()
