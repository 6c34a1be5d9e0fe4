
"""
state.py
Defines the round state dataclass for the non-transitive dice game.
Related modules:
- engine.py: Mutates and reads RoundState during a round.
- fairness.py: ExchangeResult entries are collected in the round's exchange list.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RoundState:
    """
    Public state of the game session and of the current round. Nothing here is secret:
    commitments only enter as completed, revealed exchanges.
    Fields:
        round_index (int): Number of rounds started in this session.
        user_starts (bool|None): Outcome of the first-move exchange, None until decided.
        user_die (int|None): Index of the user's die.
        computer_die (int|None): Index of the computer's die.
        user_roll (int|None): Face index rolled for the user.
        computer_roll (int|None): Face index rolled for the computer.
        user_face (int|None): Face value rolled by the user.
        computer_face (int|None): Face value rolled by the computer.
        status (str): NOT_STARTED | CHOOSING | ROLLING | ENDED.
        winner (str|None): 'user', 'computer' or 'draw' once ENDED.
        exchanges (list[ExchangeResult]): Completed exchanges of this round.
    """
    round_index: int = 0
    user_starts: Optional[bool] = None
    user_die: Optional[int] = None
    computer_die: Optional[int] = None
    user_roll: Optional[int] = None
    computer_roll: Optional[int] = None
    user_face: Optional[int] = None
    computer_face: Optional[int] = None
    status: str = "NOT_STARTED"  # CHOOSING | ROLLING | ENDED
    winner: Optional[str] = None
    exchanges: List = field(default_factory=list)
