"""Tests for the rankings database."""

import pytest
from sqlalchemy.exc import IntegrityError
from tulip_trader.database import init_database, save_game_result, get_game_result, list_rankings
from tulip_trader.simulation import GameConfig
from tulip_trader.simulation.runner import GameEngine
from tests.conftest import ScriptedRandom


@pytest.fixture
def database_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path / 'rankings.db'}"
    init_database(url)
    return url


def finished_summary(role: str, coins: int) -> dict:
    config = GameConfig(crash_day=2, growth_phase_end_day=1, decline_phase_start_day=2)
    engine = GameEngine(role, config=config, rng=ScriptedRandom(seed=0))
    engine.state["coins"] = coins
    engine.run()
    return engine.summary()


def test_save_and_load(database_url):
    summary = finished_summary("merchant", 2000)
    result_id = save_game_result("game-1", "Ada", summary, database_url=database_url)

    result = get_game_result(result_id, database_url=database_url)

    assert result["game_id"] == "game-1"
    assert result["player_name"] == "Ada"
    assert result["role"] == "merchant"
    # One day of shop rent
    assert result["final_coins"] == 1970
    assert result["final_day"] == 2
    assert result["is_win"] is True
    assert result["end_reason"] == "scheduled_crash"
    assert result["reputation"] == 100
    assert result["created_at"] is not None
    assert result["summary"] == summary


def test_farmer_has_no_reputation(database_url):
    result_id = save_game_result("game-2", "Bo", finished_summary("farmer", 500), database_url=database_url)
    assert get_game_result(result_id, database_url=database_url)["reputation"] is None


def test_one_result_per_playthrough(database_url):
    summary = finished_summary("farmer", 800)
    save_game_result("game-3", "Ada", summary, database_url=database_url)

    with pytest.raises(IntegrityError):
        save_game_result("game-3", "Ada", summary, database_url=database_url)

    replay = dict(summary, playthrough=2)
    result_id = save_game_result("game-3", "Ada", replay, database_url=database_url)
    assert get_game_result(result_id, database_url=database_url)["playthrough"] == 2
    assert len(list_rankings(database_url=database_url)) == 2


def test_missing_result(database_url):
    assert get_game_result(12345, database_url=database_url) is None


def test_rankings_richest_first(database_url):
    for name, coins in [("Ada", 1500), ("Bo", 3000), ("Cy", 800)]:
        save_game_result(f"game-{name}", name, finished_summary("farmer", coins), database_url=database_url)

    rankings = list_rankings(database_url=database_url)

    assert [entry["player_name"] for entry in rankings] == ["Bo", "Ada", "Cy"]
    assert [entry["rank"] for entry in rankings] == [1, 2, 3]
    assert "summary" not in rankings[0]


def test_rankings_pagination(database_url):
    for i in range(5):
        save_game_result(f"game-{i}", f"player-{i}", finished_summary("farmer", 100 * (i + 1)),
                         database_url=database_url)

    page = list_rankings(limit=2, offset=2, database_url=database_url)

    assert [entry["rank"] for entry in page] == [3, 4]
    assert [entry["final_coins"] for entry in page] == [300, 200]
