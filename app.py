"""Flask API server for playing Tulip Trader."""

import logging
import threading
from datetime import datetime
from typing import Dict, Any
from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError

from tulip_trader.api import (
    ACTION_SCHEMAS,
    ActionResponse,
    CreateGameRequest,
    GameSnapshot,
    RestartRequest,
    SubmitResultRequest
)
from tulip_trader.config import get_config
from tulip_trader.database import init_database, list_rankings, save_game_result, get_game_result
from tulip_trader.simulation import GameConfig
from tulip_trader.simulation.runner import GameEngine
from tulip_trader.simulation.scheduler import GameSession

# In-memory registry of live games
games: Dict[str, GameSession] = {}
created_at: Dict[str, str] = {}
games_lock = threading.Lock()

# Finished games whose clocks have stopped are dropped after this long
FINISHED_GAME_TTL_SECONDS = 3600

app = Flask(__name__)
app.config["SECRET_KEY"] = get_config().flask_secret_key
CORS(app)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _parse(schema: type, payload: Any) -> BaseModel:
    return schema.model_validate(payload if payload is not None else {})


def _snapshot(session: GameSession) -> Dict[str, Any]:
    return GameSnapshot.model_validate(session.snapshot()).model_dump()


def _get_session(game_id: str):
    with games_lock:
        return games.get(game_id)


def _evict_finished_games(now: datetime = None) -> int:
    """Drop finished, stopped games older than the TTL. Returns how many were dropped."""
    now = now or datetime.now()
    with games_lock:
        expired = [
            game_id for game_id, session in games.items()
            if session.engine.finished_at is not None
            and not session.running
            and (now - session.engine.finished_at).total_seconds() > FINISHED_GAME_TTL_SECONDS
        ]
        sessions = [games.pop(game_id) for game_id in expired]
        for game_id in expired:
            created_at.pop(game_id, None)

    for session in sessions:
        session.stop()
        session.engine.close()
    if expired:
        logger.info(f"Evicted {len(expired)} finished games")
    return len(expired)


@app.errorhandler(ValidationError)
def handle_validation_error(e: ValidationError):
    return jsonify({'error': 'Invalid request', 'details': e.errors(include_url=False, include_context=False)}), 400


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat()
    })


@app.route('/api/config/default', methods=['GET'])
def get_default_config():
    """Get the default game configuration."""
    return jsonify(GameConfig().to_dict())


@app.route('/api/games', methods=['POST'])
def create_game():
    """Start a new game for the selected role."""
    body = _parse(CreateGameRequest, request.get_json(silent=True))
    _evict_finished_games()

    try:
        config = GameConfig.from_dict(body.config)
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    app_config = get_config()
    engine = GameEngine(
        body.role,
        config=config,
        log_level=app_config.log_level,
        log_to_file=app_config.log_to_file,
        log_dir=app_config.log_dir
    )
    session = GameSession(engine)

    with games_lock:
        games[engine.game_id] = session
        created_at[engine.game_id] = datetime.now().isoformat()

    if body.autostart:
        session.start()

    logger.info(f"Started game {engine.game_id} as {body.role}")

    return jsonify({
        'game_id': engine.game_id,
        'state': _snapshot(session)
    }), 201


@app.route('/api/games', methods=['GET'])
def list_games():
    """List all live games."""
    _evict_finished_games()
    with games_lock:
        items = list(games.items())
        started = dict(created_at)

    game_list = []
    for game_id, session in items:
        snapshot = session.snapshot()
        game_list.append({
            'game_id': game_id,
            'role': snapshot['role'],
            'day': snapshot['day'],
            'coins': snapshot['coins'],
            'game_over': snapshot['game_over'],
            'running': session.running,
            'created_at': started.get(game_id)
        })

    # Sort by created_at descending
    game_list.sort(key=lambda x: x['created_at'] or '', reverse=True)

    return jsonify({
        'total': len(game_list),
        'games': game_list
    })


@app.route('/api/games/<game_id>', methods=['GET'])
def get_game(game_id: str):
    """Get the current state of a game."""
    session = _get_session(game_id)
    if not session:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(_snapshot(session))


@app.route('/api/games/<game_id>/tick', methods=['POST'])
def tick_game(game_id: str):
    """Advance a game by one day without waiting for the timer."""
    session = _get_session(game_id)
    if not session:
        return jsonify({'error': 'Game not found'}), 404
    session.tick()
    return jsonify(_snapshot(session))


@app.route('/api/games/<game_id>/actions/<action>', methods=['POST'])
def perform_action(game_id: str, action: str):
    """Run a player action."""
    session = _get_session(game_id)
    if not session:
        return jsonify({'error': 'Game not found'}), 404

    schema = ACTION_SCHEMAS.get(action)
    if schema is None:
        return jsonify({'error': f'Unknown action: {action}'}), 404

    body = _parse(schema, request.get_json(silent=True))
    result = session.perform(action, **body.model_dump())

    response = ActionResponse(
        ok=result['ok'],
        error=result['error'],
        message=result['message'],
        state=_snapshot(session)
    )
    return jsonify(response.model_dump())


@app.route('/api/games/<game_id>/restart', methods=['POST'])
def restart_game(game_id: str):
    """Start the game over, optionally as the other role."""
    session = _get_session(game_id)
    if not session:
        return jsonify({'error': 'Game not found'}), 404

    body = _parse(RestartRequest, request.get_json(silent=True))
    session.restart(body.role)
    logger.info(f"Restarted game {game_id}")
    return jsonify(_snapshot(session))


@app.route('/api/games/<game_id>', methods=['DELETE'])
def delete_game(game_id: str):
    """Stop a game's timers and drop it."""
    with games_lock:
        session = games.pop(game_id, None)
        created_at.pop(game_id, None)

    if not session:
        return jsonify({'error': 'Game not found'}), 404

    session.stop()
    session.engine.close()
    return jsonify({'message': 'Game deleted'}), 200


@app.route('/api/games/<game_id>/result', methods=['POST'])
def submit_result(game_id: str):
    """Put a finished game on the leaderboard."""
    session = _get_session(game_id)
    if not session:
        return jsonify({'error': 'Game not found'}), 404

    body = _parse(SubmitResultRequest, request.get_json(silent=True))

    # Held across the save so a concurrent submission sees result_id
    with session.lock:
        engine = session.engine
        if not engine.state['game_over']:
            return jsonify({'error': 'Game is still in progress'}), 409
        if engine.result_id is not None:
            return jsonify({'error': 'Result already submitted', 'result_id': engine.result_id}), 409

        init_database()
        try:
            result_id = save_game_result(game_id, body.player_name, engine.summary())
        except IntegrityError:
            return jsonify({'error': 'Result already submitted'}), 409
        engine.result_id = result_id

    logger.info(f"Saved result {result_id} for game {game_id} ({body.player_name})")

    return jsonify(get_game_result(result_id)), 201


@app.route('/api/results/<int:result_id>', methods=['GET'])
def get_result(result_id: int):
    """Get a stored result with its full summary."""
    init_database()
    result = get_game_result(result_id)
    if not result:
        return jsonify({'error': 'Result not found'}), 404
    return jsonify(result)


@app.route('/api/rankings', methods=['GET'])
def get_rankings():
    """Leaderboard of finished games, richest first."""
    limit = request.args.get('limit', default=50, type=int)
    offset = request.args.get('offset', default=0, type=int)

    init_database()
    rankings = list_rankings(limit=max(1, min(limit, 200)), offset=max(0, offset))

    return jsonify({
        'total': len(rankings),
        'rankings': rankings
    })


if __name__ == '__main__':
    app_config = get_config()
    logger.info("Starting Flask API server...")
    app.run(
        host='0.0.0.0',
        port=app_config.flask_port,
        debug=app_config.flask_debug
    )
