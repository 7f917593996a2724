"""Play one game headlessly with a simple policy and print the results."""

import argparse
import logging
from tulip_trader.simulation import GameConfig
from tulip_trader.simulation.runner import GameEngine


def farmer_policy(engine: GameEngine) -> None:
    """Replant every empty plot, harvest ready ones, cash out once the peak is over."""
    state = engine.state
    config = engine.config

    # A whole day passes between decisions, so every planted bulb is ready
    for plot in state["plots"]:
        if plot["state"] == "ready":
            engine.harvest(plot["plot_id"])
        if plot["state"] == "empty" and state["coins"] >= config.plant_cost:
            engine.plant(plot["plot_id"])

    if state["day"] >= config.growth_phase_end_day and state["stock"] > 0:
        engine.sell_all()


def merchant_policy(engine: GameEngine) -> None:
    """Buy cheap from farmers, fill client orders, dump stock before the panic."""
    state = engine.state
    config = engine.config

    for offer in list(state["offers"]):
        total = offer["price"] * offer["quantity"]
        if offer["type"] == "client" and state["stock"] >= offer["quantity"]:
            engine.accept_offer(offer["id"])
        elif (offer["type"] == "farmer" and state["coins"] >= total
              and state["day"] < config.early_crash_start_day):
            engine.accept_offer(offer["id"])

    if state["stock"] > 0 and state["coins"] >= config.hold_stock_cost:
        engine.hold_stock()

    if state["day"] >= config.early_crash_start_day - 1 and state["stock"] > 0:
        engine.sell_all()


def grow_through_day(engine: GameEngine) -> None:
    """Run the field clock for one day's worth of growth ticks."""
    config = engine.config
    ticks = int(config.day_interval_seconds / config.growth_interval_seconds)
    for _ in range(ticks):
        if not engine.grow():
            break


def main():
    """Run a single headless game."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--role", choices=["farmer", "merchant"], default="merchant")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", default=None, help="Write the results as JSON to this path")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    config = GameConfig(seed=args.seed)
    engine = GameEngine(
        args.role,
        config=config,
        log_level=logging.DEBUG if args.debug else logging.INFO
    )

    if args.role == "farmer":
        def policy(e: GameEngine) -> None:
            farmer_policy(e)
            grow_through_day(e)
    else:
        policy = merchant_policy

    print("=" * 60)
    print(f"Tulip Trader: headless {args.role} (seed={args.seed})")
    print("=" * 60)

    results = engine.run(policy=policy)
    summary = results["summary"]

    print(f"\nOutcome: {'WIN' if summary['is_win'] else 'LOSS'} ({summary['end_reason']})")
    print(f"  Days Played: {summary['days_played']}")
    print(f"  Final Coins: {summary['final_coins']} (profit {summary['profit']})")
    print(f"  Peak Price: {summary['peak_price']}")
    if summary["reputation"] is not None:
        print(f"  Reputation: {summary['reputation']}")

    if args.output:
        engine.save_results(results, args.output)
        print(f"\nResults saved to: {args.output}")

    return results


if __name__ == "__main__":
    main()
