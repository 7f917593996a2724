"""Game engine: owns one playthrough and drives it day by day."""

import random
import json
import logging
import uuid
from collections import Counter, deque
from datetime import datetime
from typing import Dict, Any, Optional, Callable
from tulip_trader.models import ROLES, INVALID_STATE, ActionResult, GameState, Notification
from tulip_trader.simulation import actions
from tulip_trader.simulation.config import GameConfig
from tulip_trader.simulation.field import create_plots, grow_plots, GROWING
from tulip_trader.graph.workflow import create_day_graph
from tulip_trader.utils import setup_logger, close_logger


# Player intents the engine accepts, by name
ACTIONS: Dict[str, Callable[..., ActionResult]] = {
    "plant": actions.plant,
    "harvest": actions.harvest,
    "accept_offer": actions.accept_offer,
    "reject_offer": actions.reject_offer,
    "hold_stock": actions.hold_stock,
    "flash_sale": actions.flash_sale,
    "sell_all": actions.sell_all,
    "set_bid": actions.set_bid,
    "set_ask": actions.set_ask,
    "adjust_bid": actions.adjust_bid,
    "adjust_ask": actions.adjust_ask,
}

# Keys of the state that are collaborators, not game data
_PRIVATE_KEYS = ("rng", "config")

MAX_NOTIFICATIONS = 20


class GameEngine:
    """Orchestrates a single playthrough of the tulip market."""

    def __init__(
        self,
        role: str,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        game_id: Optional[str] = None,
        log_level: int = logging.INFO,
        log_to_file: bool = False,
        log_dir: str = "logs"
    ):
        """
        Initialize the engine.

        Args:
            role: "farmer" or "merchant"
            config: Game configuration (defaults to the canonical rule set)
            rng: Random generator; seeded from config.seed when omitted
            game_id: Identifier used in logs
            log_level: Logging level (DEBUG for node-level detail)
            log_to_file: Whether to also write a per-game log file
            log_dir: Directory for log files
        """
        self.config = config or GameConfig()
        # A self-seeded generator is re-seeded on restart; an injected one is left alone
        self._owns_rng = rng is None
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.game_id = game_id or uuid.uuid4().hex[:12]
        self.graph = create_day_graph()
        self.logger = setup_logger(
            name=f"tulip_trader.game.{self.game_id}",
            level=log_level,
            log_to_file=log_to_file,
            log_dir=log_dir
        )
        self.notifications: deque = deque(maxlen=MAX_NOTIFICATIONS)
        self.action_stats: Counter = Counter()
        self.finished_at: Optional[datetime] = None
        self.playthrough = 1
        self.result_id: Optional[int] = None  # Rankings entry once submitted
        self.state: GameState = self.create_initial_state(role)
        self.logger.info(f"New game {self.game_id}: {role}, {self.config.initial_coins} coins, "
                         f"price {self.config.base_price}")

    def create_initial_state(self, role: str) -> GameState:
        """
        Create the state for a fresh playthrough.

        Args:
            role: "farmer" or "merchant"

        Returns:
            Initial GameState
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r} (expected one of {', '.join(ROLES)})")

        config = self.config
        initial_state: GameState = {
            "role": role,
            "coins": config.initial_coins,
            "day": 1,
            "stock": 0,
            "current_price": config.base_price,
            "price_history": [config.base_price],
            "hype": config.initial_hype,
            "reputation": config.initial_reputation,
            "bid_price": config.base_price,
            "ask_price": config.base_price + 5,
            "offers": [],
            "plots": create_plots(config),
            "news": "",
            "news_log": [],
            "is_flash_sale_active": False,
            "stock_protected": False,
            "game_over": False,
            "is_win": False,
            "end_reason": None,
            "rng": self.rng,
            "config": config
        }
        return initial_state

    # ========================================================================
    # DAY LOOP
    # ========================================================================

    def tick(self) -> bool:
        """
        Advance the market by one day.

        Returns:
            True if a day was simulated, False if the game is already over
        """
        if self.state["game_over"]:
            self.logger.debug(f"Tick ignored: game {self.game_id} is over")
            return False

        day = self.state["day"] + 1
        try:
            self.logger.debug(f"Starting LangGraph execution for day {day}")
            final_state = self.graph.invoke(self.state)
        except Exception as e:
            self.logger.error(f"Error during LangGraph execution on day {day}: {str(e)}")
            self.logger.exception("Full traceback:")
            raise

        previous_news_count = len(self.state["news_log"])
        # Channels left at None may be omitted from the graph output
        self.state = {**self.state, **final_state}

        if len(self.state["news_log"]) > previous_news_count:
            self._notify("info", self.state["news"])

        self._log_day_summary()

        if self.state["game_over"]:
            self._announce_end()
        return True

    def grow(self) -> bool:
        """
        Advance every growing plot by one growth tick.

        Returns:
            True if any plot is still growing or just became ready
        """
        if self.state["game_over"]:
            return False
        plots = self.state["plots"]
        if not any(plot["state"] == GROWING for plot in plots):
            return False
        self.state["plots"] = grow_plots(plots, self.config)
        return True

    def clear_news(self) -> None:
        """Take the current headline off the board."""
        self.state["news"] = ""

    # ========================================================================
    # PLAYER ACTIONS
    # ========================================================================

    def perform(self, action: str, **kwargs) -> ActionResult:
        """
        Run a player action by name.

        Args:
            action: One of ACTIONS
            **kwargs: Action arguments (plot_id, offer_id, price, delta)

        Returns:
            ActionResult describing success or the rejection
        """
        handler = ACTIONS.get(action)
        if handler is None:
            raise ValueError(f"Unknown action: {action!r}")

        was_over = self.state["game_over"]
        result = handler(self.state, **kwargs)

        self.action_stats[(action, "ok" if result["ok"] else "rejected")] += 1
        if result["ok"]:
            self.logger.debug(f"[Day {self.state['day']}] {action}({kwargs}) → {result['message']}")
            self._notify("success", result["message"])
        else:
            self.logger.debug(f"[Day {self.state['day']}] {action}({kwargs}) rejected: "
                              f"{result['error']} - {result['message']}")
            # Invalid-state rejections are silent no-ops
            if result["error"] != INVALID_STATE:
                self._notify("error", result["message"])

        if self.state["game_over"] and not was_over:
            self._announce_end()
        return result

    def plant(self, plot_id: int) -> ActionResult:
        return self.perform("plant", plot_id=plot_id)

    def harvest(self, plot_id: int) -> ActionResult:
        return self.perform("harvest", plot_id=plot_id)

    def accept_offer(self, offer_id: str) -> ActionResult:
        return self.perform("accept_offer", offer_id=offer_id)

    def reject_offer(self, offer_id: str) -> ActionResult:
        return self.perform("reject_offer", offer_id=offer_id)

    def hold_stock(self) -> ActionResult:
        return self.perform("hold_stock")

    def flash_sale(self) -> ActionResult:
        return self.perform("flash_sale")

    def sell_all(self) -> ActionResult:
        return self.perform("sell_all")

    def set_bid(self, price: int) -> ActionResult:
        return self.perform("set_bid", price=price)

    def set_ask(self, price: int) -> ActionResult:
        return self.perform("set_ask", price=price)

    def restart(self, role: Optional[str] = None) -> None:
        """Throw the current playthrough away and start over, optionally as another role."""
        role = role or self.state["role"]
        if self._owns_rng:
            self.rng = random.Random(self.config.seed)
        self.state = self.create_initial_state(role)
        self.finished_at = None
        self.playthrough += 1
        self.result_id = None
        self.notifications.clear()
        self.action_stats.clear()
        self.logger.info(f"Game {self.game_id} restarted as {role}")

    # ========================================================================
    # READ SIDE
    # ========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view of the state for rendering."""
        state = self.state
        view = {key: value for key, value in state.items() if key not in _PRIVATE_KEYS}
        view["price_history"] = list(state["price_history"])
        view["offers"] = [dict(offer) for offer in state["offers"]]
        view["plots"] = [dict(plot) for plot in state["plots"]]
        view["news_log"] = [dict(item) for item in state["news_log"]]

        history = state["price_history"]
        view["price_change"] = history[-1] - history[-2] if len(history) > 1 else 0

        if state["role"] == "merchant":
            spread = state["ask_price"] - state["bid_price"]
            view["spread"] = spread
            view["margin"] = round(spread / state["bid_price"] * 100, 1) if state["bid_price"] > 0 else 0.0
        else:
            view["reputation"] = None
            view["spread"] = None
            view["margin"] = None

        view["game_id"] = self.game_id
        view["notifications"] = list(self.notifications)
        return view

    def summary(self) -> Dict[str, Any]:
        """
        Generate summary statistics for the playthrough so far.

        Returns:
            Summary statistics
        """
        state = self.state
        history = state["price_history"]
        action_summary: Dict[str, Dict[str, int]] = {}
        for (action, outcome), count in self.action_stats.items():
            action_summary.setdefault(action, {"ok": 0, "rejected": 0})[outcome] = count

        return {
            "role": state["role"],
            "playthrough": self.playthrough,
            "days_played": state["day"],
            "final_coins": state["coins"],
            "profit": state["coins"] - self.config.initial_coins,
            "final_stock": state["stock"],
            "reputation": state["reputation"] if state["role"] == "merchant" else None,
            "peak_price": max(history),
            "final_price": state["current_price"],
            "final_hype": state["hype"],
            "headlines": len(state["news_log"]),
            "open_offers": len(state["offers"]),
            "game_over": state["game_over"],
            "is_win": state["is_win"],
            "end_reason": state["end_reason"],
            "actions": action_summary
        }

    def run(
        self,
        policy: Optional[Callable[["GameEngine"], None]] = None,
        max_days: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Play the game headlessly until it ends.

        Args:
            policy: Called once per day before the tick to take player actions
            max_days: Stop after this many ticks even if the game is not over

        Returns:
            Results including the final snapshot and summary
        """
        start_time = datetime.now()

        self.logger.info("=" * 60)
        self.logger.info(f"Headless run of game {self.game_id} as {self.state['role']}")
        self.logger.info("=" * 60)

        days = 0
        while not self.state["game_over"]:
            if max_days is not None and days >= max_days:
                break
            if policy is not None:
                policy(self)
                if self.state["game_over"]:
                    break
            self.tick()
            days += 1

        end_time = datetime.now()
        duration = (end_time - start_time).total_seconds()

        results = {
            "game_id": self.game_id,
            "config": self.config.to_dict(),
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration_seconds": duration,
            "final_state": self.snapshot(),
            "summary": self.summary()
        }

        self._log_summary(results["summary"])
        return results

    def save_results(self, results: Dict[str, Any], filepath: str):
        """
        Save run results to file.

        Args:
            results: Results from run()
            filepath: Path to save file
        """
        with open(filepath, 'w') as f:
            json.dump(results, f, indent=2, default=str)

    def close(self) -> None:
        """Release the per-game logger and its log file, if any."""
        close_logger(self.logger)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _notify(self, level: str, message: str) -> None:
        notification: Notification = {"level": level, "message": message}
        self.notifications.append(notification)

    def _announce_end(self) -> None:
        state = self.state
        self.finished_at = datetime.now()
        reason = state["end_reason"]
        if reason == "wealth":
            message = f"🎉 You won! You accumulated {state['coins']} florins before the crash!"
        elif reason == "early_crash":
            message = ("💥 Early market collapse! Shock crash hit the market, but you survived."
                       if state["is_win"] else
                       "💥 Early market collapse! A sudden panic wiped out the market value.")
        else:
            message = ("💥 The market collapsed! But you survived!"
                       if state["is_win"] else
                       "💥 The market collapsed! Tulips lost all value!")

        self._notify("success" if state["is_win"] else "error", message)
        self.logger.info(f"Game over on day {state['day']}: {reason}, "
                         f"{'win' if state['is_win'] else 'loss'}, {state['coins']} coins")

    def _log_day_summary(self) -> None:
        state = self.state
        line = (f"--- Day {state['day']} --- price {state['current_price']}, hype {state['hype']}, "
                f"coins {state['coins']}, stock {state['stock']}")
        if state["role"] == "merchant":
            line += f", reputation {state['reputation']}, offers {len(state['offers'])}"
        self.logger.info(line)

    def _log_summary(self, summary: Dict[str, Any]) -> None:
        self.logger.info("")
        self.logger.info("FINAL GAME SUMMARY")
        self.logger.info(f"  Role: {summary['role']}")
        self.logger.info(f"  Days Played: {summary['days_played']}")
        self.logger.info(f"  Final Coins: {summary['final_coins']} (profit {summary['profit']})")
        self.logger.info(f"  Final Stock: {summary['final_stock']}")
        self.logger.info(f"  Peak Price: {summary['peak_price']}")
        if summary["reputation"] is not None:
            self.logger.info(f"  Reputation: {summary['reputation']}")
        self.logger.info(f"  Outcome: {summary['end_reason'] or 'in progress'} "
                         f"({'win' if summary['is_win'] else 'no win'})")
        self.logger.info("=" * 60)
