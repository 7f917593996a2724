"""LangGraph workflow for one market day."""

import logging
from typing import Literal
from langgraph.graph import StateGraph, END
from tulip_trader.models import GameState
from tulip_trader.graph import nodes

# Get logger for workflow routing
logger = logging.getLogger("tulip_trader.workflow")


def after_early_crash(state: GameState) -> Literal["record_collapse", "check_scheduled_crash"]:
    """Stop the day if the bubble burst early."""
    if state["game_over"]:
        logger.debug(f"[Day {state['day']}] Router: early crash → record_collapse")
        return "record_collapse"
    return "check_scheduled_crash"


def after_scheduled_crash(state: GameState) -> Literal["record_collapse", "update_price"]:
    """Stop the day on the crash day, otherwise reprice the market."""
    if state["game_over"]:
        logger.debug(f"[Day {state['day']}] Router: scheduled crash → record_collapse")
        return "record_collapse"
    return "update_price"


def create_day_graph() -> StateGraph:
    """
    Create the LangGraph workflow for a single day tick.

    advance_day → apply_merchant_costs → update_hype → publish_news →
    generate_offers → check_early_crash → check_scheduled_crash →
    update_price → check_wealth_win. Either crash check short-circuits to
    record_collapse and ends the day.

    Returns:
        Compiled StateGraph ready to run
    """
    graph = StateGraph(GameState)

    # Add nodes
    graph.add_node("advance_day", nodes.advance_day)
    graph.add_node("apply_merchant_costs", nodes.apply_merchant_costs)
    graph.add_node("update_hype", nodes.update_hype)
    graph.add_node("publish_news", nodes.publish_news)
    graph.add_node("generate_offers", nodes.generate_offers)
    graph.add_node("check_early_crash", nodes.check_early_crash)
    graph.add_node("check_scheduled_crash", nodes.check_scheduled_crash)
    graph.add_node("record_collapse", nodes.record_collapse)
    graph.add_node("update_price", nodes.update_price)
    graph.add_node("check_wealth_win", nodes.check_wealth_win)

    # Set entry point
    graph.set_entry_point("advance_day")

    graph.add_edge("advance_day", "apply_merchant_costs")
    graph.add_edge("apply_merchant_costs", "update_hype")
    graph.add_edge("update_hype", "publish_news")
    graph.add_edge("publish_news", "generate_offers")
    graph.add_edge("generate_offers", "check_early_crash")

    graph.add_conditional_edges(
        "check_early_crash",
        after_early_crash,
        {
            "record_collapse": "record_collapse",
            "check_scheduled_crash": "check_scheduled_crash"
        }
    )

    graph.add_conditional_edges(
        "check_scheduled_crash",
        after_scheduled_crash,
        {
            "record_collapse": "record_collapse",
            "update_price": "update_price"
        }
    )

    graph.add_edge("update_price", "check_wealth_win")
    graph.add_edge("check_wealth_win", END)
    graph.add_edge("record_collapse", END)

    return graph.compile()
