"""
Adversarial counterparties. Neither can bias the result of an exchange: the computer's committed secret is
uniform and independent of anything they can see.
"""

from .base import Counterparty
from . import register_agent


@register_agent("constant")
class ConstantCounterparty(Counterparty):
    """Always contributes the same value (reduced into range)."""
    def __init__(self, value=0):
        self.value = value

    def choose_value(self, view):
        return self.value % view["max_value"]


@register_agent("digest_guess")
class DigestGuessCounterparty(Counterparty):
    """
    Tries to steer the result by deriving its contribution from the disclosed digest.
    Without the key the digest carries no usable information about the secret.
    """
    def __init__(self, target=0):
        """
        Args:
            target (int): Result this counterparty hopes to force.
        """
        self.target = target

    def choose_value(self, view):
        max_value = view["max_value"]
        guessed_secret = int(view["digest"], 16) % max_value
        return (self.target - guessed_secret) % max_value
