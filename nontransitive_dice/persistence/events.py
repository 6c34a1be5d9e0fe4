
"""
events.py
Defines the ExchangeEvent dataclass recorded for every step of a fair randomness exchange.
Used by recorder.py and fairness.py to keep an audit trail that can be replayed or verified later.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ExchangeEvent:
    """
    Represents a single protocol step (commitment disclosed, contribution recorded, reveal, result).
    Fields:
        game_id (str|None): Identifier of the game session.
        event_type (str): Type of event (e.g., 'Committed', 'Revealed').
        payload (dict): Event-specific data.
        label (str|None): Label of the exchange the event belongs to.
    """
    game_id: Optional[str]
    event_type: str
    payload: Dict[str, Any]
    label: Optional[str] = None
