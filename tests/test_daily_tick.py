"""
Tests for the daily market tick.

Random draws per tick, in order:
1. merchant only: offer roll (offer when < offer_probability), then two more
   draws for the offer's type and price when one is generated
2. from the early-crash start day: one crash roll
Headline and name choices use the bit generator and consume no draws.
"""

import math
import pytest
from tulip_trader.simulation import GameConfig
from tulip_trader.simulation.market import calculate_price
from tulip_trader.simulation.runner import GameEngine
from tests.conftest import ScriptedRandom

NO_OFFER = 0.99
NO_CRASH = 0.99
CRASH = 0.0


def make_engine(role: str, draws=(), **overrides) -> GameEngine:
    return GameEngine(role, config=GameConfig(**overrides), rng=ScriptedRandom(draws))


class TestMerchantCosts:
    """Shop rent, storage and stock decay."""

    def test_rent_only_without_stock(self):
        """1000 coins, no stock: one tick costs the 30 coin shop rent."""
        engine = make_engine("merchant", [NO_OFFER])
        engine.tick()
        assert engine.state["day"] == 2
        assert engine.state["coins"] == 970
        assert engine.state["stock"] == 0

    def test_storage_and_decay(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.state["stock"] = 50
        engine.tick()
        # 30 rent + 50 * 2 storage, then 8% of the stock wilts
        assert engine.state["coins"] == 870
        assert engine.state["stock"] == 46

    def test_protected_stock_decays_slower(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.state["stock"] = 50
        engine.state["stock_protected"] = True
        engine.tick()
        assert engine.state["stock"] == 48
        assert engine.state["stock_protected"] is False

    def test_coins_floor_at_zero(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.state["coins"] = 10
        engine.state["stock"] = 20
        engine.tick()
        assert engine.state["coins"] == 0

    def test_flash_sale_lasts_one_day(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.state["is_flash_sale_active"] = True
        engine.tick()
        assert engine.state["is_flash_sale_active"] is False

    def test_farmer_pays_nothing(self):
        engine = make_engine("farmer")
        engine.state["stock"] = 10
        engine.tick()
        assert engine.state["coins"] == 1000
        assert engine.state["stock"] == 10


class TestHypeAndPrice:
    """Hype drift and repricing."""

    def test_hype_grows_in_growth_phase(self):
        engine = make_engine("farmer")
        engine.tick()
        assert engine.state["hype"] == 55

    def test_hype_clamped_at_100(self):
        engine = make_engine("farmer")
        engine.state["hype"] = 98
        engine.tick()
        assert engine.state["hype"] == 100

    def test_hype_drifts_down_at_peak(self):
        engine = make_engine("farmer")
        engine.state["day"] = 15
        engine.state["hype"] = 80
        engine.tick()
        assert engine.state["hype"] == 78

    def test_hype_drops_in_decline_and_clamps_at_zero(self):
        engine = make_engine("farmer", [NO_CRASH, NO_CRASH])
        engine.state["day"] = 24
        engine.state["hype"] = 15
        engine.tick()
        assert engine.state["hype"] == 5
        engine.tick()
        assert engine.state["hype"] == 0

    def test_price_history_and_default_spread(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.tick()
        price = calculate_price(2, 55, engine.config)
        assert engine.state["current_price"] == price
        assert engine.state["price_history"] == [20, price]
        assert engine.state["bid_price"] == math.floor(price * 0.9)
        assert engine.state["ask_price"] == math.floor(price * 1.1)

    def test_player_override_lasts_until_next_tick(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.set_ask(500)
        assert engine.state["ask_price"] == 500
        engine.tick()
        assert engine.state["ask_price"] == math.floor(engine.state["current_price"] * 1.1)

    def test_history_grows_one_entry_per_tick(self):
        engine = make_engine("farmer")
        for _ in range(10):
            engine.tick()
        assert len(engine.state["price_history"]) == 11
        assert engine.state["day"] == 11


class TestOffersAndNews:
    """Offer generation and headlines."""

    def test_offer_generated_from_previous_price(self):
        engine = make_engine("merchant", [0.1, 0.9, 0.0])
        engine.tick()
        offers = engine.state["offers"]
        assert len(offers) == 1
        assert offers[0]["type"] == "farmer"
        # Priced off the opening price of 20 at the lowest factor
        assert offers[0]["price"] == 14

    def test_no_offer_on_high_roll(self):
        engine = make_engine("merchant", [0.7])
        engine.tick()
        assert engine.state["offers"] == []

    def test_offers_accumulate(self):
        engine = make_engine("merchant", [0.1, 0.9, 0.0, 0.1, 0.2, 0.0])
        engine.tick()
        engine.tick()
        assert [offer["type"] for offer in engine.state["offers"]] == ["farmer", "client"]

    def test_farmer_never_gets_offers(self):
        engine = make_engine("farmer", [0.0, 0.0])
        engine.tick()
        assert engine.state["offers"] == []
        assert engine.rng.queue == [0.0, 0.0]

    def test_news_published_and_logged(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.state["day"] = 14
        engine.tick()
        assert engine.state["news"]
        assert engine.state["news_log"] == [{"day": 15, "headline": engine.state["news"]}]
        assert engine.notifications[-1] == {"level": "info", "message": engine.state["news"]}

    def test_news_clears(self):
        engine = make_engine("farmer")
        engine.state["day"] = 16
        engine.tick()
        assert engine.state["news"]
        engine.clear_news()
        assert engine.state["news"] == ""
        assert len(engine.state["news_log"]) == 1


class TestCrash:
    """Early and scheduled collapse."""

    def test_early_crash_preempts_the_rest_of_the_day(self):
        engine = make_engine("merchant", [NO_OFFER, CRASH])
        engine.state["day"] = 19
        engine.state["hype"] = 60
        bid, ask = engine.state["bid_price"], engine.state["ask_price"]

        assert engine.tick() is True
        state = engine.state
        assert state["game_over"] is True
        assert state["end_reason"] == "early_crash"
        assert state["is_win"] is True  # reputation 100 >= 60
        assert state["day"] == 20
        # No repricing, only the collapse is shown
        assert state["bid_price"] == bid
        assert state["ask_price"] == ask
        assert state["current_price"] == 2
        assert state["price_history"][-1] == 2

    def test_merchant_with_poor_reputation_loses(self):
        engine = make_engine("merchant", [NO_OFFER, CRASH])
        engine.state["day"] = 19
        engine.state["reputation"] = 59
        engine.tick()
        assert engine.state["game_over"] is True
        assert engine.state["is_win"] is False

    def test_farmer_survives_any_crash(self):
        engine = make_engine("farmer", [CRASH])
        engine.state["day"] = 20
        engine.state["coins"] = 0
        engine.tick()
        assert engine.state["end_reason"] == "early_crash"
        assert engine.state["is_win"] is True

    def test_no_crash_roll_before_start_day(self):
        engine = make_engine("farmer", [CRASH])
        engine.state["day"] = 16
        engine.tick()
        assert engine.state["game_over"] is False
        assert engine.rng.queue == [CRASH]

    def test_scheduled_crash(self):
        engine = make_engine("farmer", [NO_CRASH])
        engine.state["day"] = 29
        engine.tick()
        assert engine.state["day"] == 30
        assert engine.state["game_over"] is True
        assert engine.state["end_reason"] == "scheduled_crash"
        assert engine.state["current_price"] == 2

    def test_scheduled_crash_without_early_crash_window(self):
        engine = make_engine("merchant", [NO_OFFER] * 10, crash_day=5,
                             growth_phase_end_day=3, decline_phase_start_day=4)
        for _ in range(10):
            engine.tick()
        assert engine.state["day"] == 5
        assert engine.state["end_reason"] == "scheduled_crash"

    def test_crash_announced(self):
        engine = make_engine("merchant", [NO_OFFER, CRASH])
        engine.state["day"] = 19
        engine.tick()
        assert engine.notifications[-1]["level"] == "success"
        assert "Early market collapse" in engine.notifications[-1]["message"]


class TestGameOver:
    """Nothing moves once the game has ended."""

    def test_ticks_are_ignored_after_game_over(self):
        engine = make_engine("merchant", [NO_OFFER, CRASH, 0.0, 0.0, 0.0])
        engine.state["day"] = 19
        engine.state["stock"] = 10
        engine.tick()
        frozen = dict(engine.state)

        for _ in range(3):
            assert engine.tick() is False

        for key in ("coins", "stock", "day", "is_win", "end_reason", "offers"):
            assert engine.state[key] == frozen[key]
        # The crash predicate was not evaluated again
        assert engine.rng.queue == [0.0, 0.0, 0.0]

    def test_wealth_win_before_crash(self):
        engine = make_engine("merchant", [NO_OFFER])
        engine.state["coins"] = 6000
        engine.tick()
        assert engine.state["game_over"] is True
        assert engine.state["is_win"] is True
        assert engine.state["end_reason"] == "wealth"
        assert "You won" in engine.notifications[-1]["message"]

    def test_wealth_on_crash_day_is_a_crash(self):
        engine = make_engine("farmer", [NO_CRASH])
        engine.state["day"] = 29
        engine.state["coins"] = 9000
        engine.tick()
        assert engine.state["end_reason"] == "scheduled_crash"


class TestWholeGames:
    """Seeded full playthroughs."""

    @pytest.mark.parametrize("role", ["farmer", "merchant"])
    @pytest.mark.parametrize("seed", range(8))
    def test_books_never_go_negative(self, role, seed):
        engine = GameEngine(role, config=GameConfig(seed=seed))
        picker = ScriptedRandom(seed=seed + 100)
        actions = ["sell_all", "hold_stock", "flash_sale", "plant", "harvest",
                   "accept_offer", "reject_offer", "set_bid", "set_ask"]

        def policy(e: GameEngine) -> None:
            for _ in range(3):
                action = picker.choice(actions)
                if action in ("plant", "harvest"):
                    e.perform(action, plot_id=picker.randint(0, 5))
                elif action in ("accept_offer", "reject_offer"):
                    offers = e.state["offers"]
                    offer_id = picker.choice(offers)["id"] if offers else "missing"
                    e.perform(action, offer_id=offer_id)
                elif action in ("set_bid", "set_ask"):
                    e.perform(action, price=picker.randint(-10, 100))
                else:
                    e.perform(action)
                e.grow()
                assert e.state["coins"] >= 0
                assert e.state["stock"] >= 0
                assert e.state["bid_price"] >= 1 and e.state["ask_price"] >= 1
                assert 0 <= e.state["hype"] <= 100
                assert 0 <= e.state["reputation"] <= 100

        results = engine.run(policy=policy)

        assert engine.state["game_over"] is True
        assert engine.state["day"] <= engine.config.crash_day
        assert results["summary"]["days_played"] == engine.state["day"]
        assert len(engine.state["price_history"]) >= engine.state["day"]

    def test_same_seed_same_market(self):
        first = GameEngine("merchant", config=GameConfig(seed=42))
        second = GameEngine("merchant", config=GameConfig(seed=42))
        first.run()
        second.run()
        assert first.state["price_history"] == second.state["price_history"]
        assert first.state["end_reason"] == second.state["end_reason"]
        assert ([(o["type"], o["price"], o["quantity"]) for o in first.state["offers"]]
                == [(o["type"], o["price"], o["quantity"]) for o in second.state["offers"]])

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_headless_policies_finish_games(self, seed):
        from run_simulation import farmer_policy, merchant_policy, grow_through_day

        def farm(e: GameEngine) -> None:
            farmer_policy(e)
            grow_through_day(e)

        farmer = GameEngine("farmer", config=GameConfig(seed=seed))
        merchant = GameEngine("merchant", config=GameConfig(seed=seed))

        farmer_summary = farmer.run(policy=farm)["summary"]
        merchant_summary = merchant.run(policy=merchant_policy)["summary"]

        assert farmer_summary["game_over"] and merchant_summary["game_over"]
        assert farmer_summary["actions"]["plant"]["ok"] > 0
        assert farmer_summary["actions"]["harvest"]["ok"] > 0

    def test_run_respects_max_days(self):
        engine = make_engine("farmer")
        results = engine.run(max_days=5)
        assert engine.state["day"] == 6
        assert results["summary"]["game_over"] is False
