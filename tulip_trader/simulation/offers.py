"""Random trade offers for the merchant."""

import math
import uuid
from typing import Any
from tulip_trader.models import Offer


FARMER_NAMES = ["Hans", "Pieter", "Jan", "Willem", "Dirk"]
CLIENT_NAMES = ["Burgomaster", "Wealthy Merchant", "Noble", "Banker"]


def generate_offer(current_price: int, rng: Any) -> Offer:
    """
    Generate a random offer priced off the current market price.

    Farmers sell 1-5 tulips at 70-100% of the market price; clients buy
    1-3 tulips at 110-150% of it.

    Args:
        current_price: Market price the offer is anchored to
        rng: random.Random compatible generator

    Returns:
        A new Offer with a unique id
    """
    is_farmer = rng.random() > 0.5

    if is_farmer:
        offer: Offer = {
            "id": f"farmer-{uuid.uuid4().hex}",
            "type": "farmer",
            "quantity": rng.randint(1, 5),
            "price": max(0, math.floor(current_price * (0.7 + rng.random() * 0.3))),
            "name": rng.choice(FARMER_NAMES)
        }
    else:
        offer = {
            "id": f"client-{uuid.uuid4().hex}",
            "type": "client",
            "quantity": rng.randint(1, 3),
            "price": max(0, math.floor(current_price * (1.1 + rng.random() * 0.4))),
            "name": rng.choice(CLIENT_NAMES)
        }

    return offer
