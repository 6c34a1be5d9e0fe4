from abc import ABC, abstractmethod
from typing import Any, Dict


class Counterparty(ABC):
    """
    Abstract base class for automated counterparties of a fair randomness exchange.
    A counterparty sees only the exchange view (label, max_value, digest) and returns its contribution.
    Instances are callable, so they can be passed directly as the prompt of fair_random or GameEngine.
    """

    @abstractmethod
    def choose_value(self, view: Dict[str, Any]) -> int:
        """
        Given the exchange view, return a contribution in [0, max_value).
        Args:
            view (dict): Keys 'label', 'max_value' and 'digest'.
        Returns:
            int: The contribution.
        """
        raise NotImplementedError

    def __call__(self, view: Dict[str, Any]) -> int:
        return self.choose_value(view)
