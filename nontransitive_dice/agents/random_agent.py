import random

from .base import Counterparty
from . import register_agent


@register_agent("random")
class RandomCounterparty(Counterparty):
    """
    An honest counterparty: contributes a uniform value in [0, max_value) from its own RNG.
    """
    def __init__(self, rng=None):
        """
        Args:
            rng: Optional random number generator (random.Random); seed it for reproducible simulations.
        """
        self.rng = rng or random.Random()

    def choose_value(self, view):
        return self.rng.randrange(view["max_value"])
