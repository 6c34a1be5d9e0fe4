
"""
engine.py
Implements the GameEngine class, which plays rounds of the non-transitive dice game on top of the fair
randomness protocol: who moves first, the computer's die choice, and both rolls are each decided by a
commit-reveal exchange with the counterparty.
Related modules:
- config.py: GameConfig is used to configure the engine.
- state.py: RoundState holds all round data.
- dice.py: DieSet holds the dice in play.
- fairness.py: fair_random runs every exchange.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from .config import DEFAULT_CONFIG, GameConfig
from .dice import DieSet
from .fairness import ExchangeResult, Prompt, RandBytes, fair_random
from .state import RoundState

logger = logging.getLogger(__name__)

FIRST_MOVE_LABEL = "First move"
COMPUTER_DIE_LABEL = "Computer die choice"
COMPUTER_DIE_REROLL_LABEL = "Computer die choice (re-roll to avoid tie)"
USER_ROLL_LABEL = "Your roll"
COMPUTER_ROLL_LABEL = "Computer roll"


class IllegalMoveError(Exception):
    """
    Raised when an illegal move is attempted (unknown die index, step out of order).
    """
    pass


class GameEngine:
    """
    Round state machine for the dice game. Holds the immutable DieSet for the session and
    asks the counterparty for one contribution per exchange through a prompt callable.
    """
    def __init__(self, dice_set: DieSet, config: Optional[GameConfig] = None, recorder=None,
                 randbytes: Optional[RandBytes] = None, game_id: Optional[str] = None,
                 on_exchange: Optional[Callable[[ExchangeResult], None]] = None):
        """
        Initialize a new game engine.
        Args:
            dice_set (DieSet): The validated dice in play.
            config (GameConfig, optional): Game configuration.
            recorder (InMemoryRecorder, optional): Receives every exchange's events.
            randbytes (callable, optional): Byte source for commitments, for deterministic runs.
            game_id (str, optional): Identifier stamped on recorded events.
            on_exchange (callable, optional): Called with each ExchangeResult as soon as it completes.
        """
        self.dice = dice_set
        self.config = config or DEFAULT_CONFIG
        self.recorder = recorder
        self.randbytes = randbytes
        self.game_id = game_id
        self.on_exchange = on_exchange
        self.state = RoundState()
        self._events = []
        # turn_log holds per-step snapshots that can be serialized to JSON
        self.turn_log = []

    def _emit(self, event: Dict):
        """
        Internal: Record an event (dict) for later retrieval.
        """
        self._events.append(event)

    def pop_events(self):
        """
        Return and clear all emitted events since last call.
        Returns:
            list[dict]: List of event dicts.
        """
        ev = list(self._events)
        self._events.clear()
        return ev

    def get_events(self):
        """
        Return all events emitted so far (does not clear).
        """
        return list(self._events)

    def _snapshot(self, step: Optional[str] = None):
        """
        Internal: Append a JSON-friendly snapshot of the round state to turn_log.
        Args:
            step (str|None): Name of the step that produced this state.
        Returns:
            dict: Snapshot of state.
        """
        s = self.state
        snap = {
            "step": step,
            "round_index": s.round_index,
            "status": s.status,
            "user_starts": s.user_starts,
            "user_die": s.user_die,
            "computer_die": s.computer_die,
            "user_face": s.user_face,
            "computer_face": s.computer_face,
            "winner": s.winner,
            "exchanges": len(s.exchanges),
        }
        self.turn_log.append(snap)
        return snap

    def _exchange(self, max_value: int, label: str, prompt: Prompt) -> ExchangeResult:
        result = fair_random(max_value, label, prompt, config=self.config, recorder=self.recorder,
                             randbytes=self.randbytes, game_id=self.game_id)
        self.state.exchanges.append(result)
        self._emit({"type": "ExchangeCompleted", "label": label, "result": result.result})
        if self.on_exchange is not None:
            self.on_exchange(result)
        return result

    def decide_first_move(self, prompt: Prompt) -> bool:
        """
        Run the first-move exchange over {0, 1}; 0 means the user starts.
        Args:
            prompt (callable): Counterparty prompt.
        Returns:
            bool: True if the user moves first.
        """
        result = self._exchange(2, FIRST_MOVE_LABEL, prompt)
        self.state.user_starts = result.result == 0
        self._emit({"type": "FirstMoveDecided", "user_starts": self.state.user_starts})
        self._snapshot(step="FirstMove")
        return self.state.user_starts

    def start_new_round(self) -> None:
        """
        Reset the per-round fields and emit RoundStarted. The first-move decision carries over.
        """
        s = self.state
        s.round_index += 1
        s.user_die = None
        s.computer_die = None
        s.user_roll = None
        s.computer_roll = None
        s.user_face = None
        s.computer_face = None
        s.winner = None
        s.exchanges = []
        s.status = "CHOOSING"
        self._emit({"type": "RoundStarted", "round": s.round_index})
        self._snapshot(step="RoundStarted")

    def _check_die_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.dice):
            raise IllegalMoveError(f"Invalid die selection: {index!r}")

    def choose_user_die(self, index: int) -> None:
        """
        Record the user's die.
        Raises:
            IllegalMoveError: If the round is not in the choosing step or index is not a die index.
        """
        if self.state.status != "CHOOSING":
            raise IllegalMoveError("Dice can only be chosen at the start of a round")
        self._check_die_index(index)
        self.state.user_die = index
        self._emit({"type": "DieChosen", "die": index})

    def select_computer_die(self, user_index: int, prompt: Prompt) -> int:
        """
        Pick the computer's die with a fair exchange over all dice. On a collision with the user's die,
        the whole exchange is run again with a fresh commitment; the rejected value is never remapped.
        Args:
            user_index (int): The user's die index.
            prompt (callable): Counterparty prompt.
        Returns:
            int: The computer's die index, different from user_index.
        """
        n = len(self.dice)
        choice = self._exchange(n, COMPUTER_DIE_LABEL, prompt).result
        while choice == user_index:
            logger.debug("Computer die choice collided with die %d, running a new exchange", user_index)
            choice = self._exchange(n, COMPUTER_DIE_REROLL_LABEL, prompt).result
        self.state.computer_die = choice
        self._emit({"type": "ComputerDieChosen", "die": choice})
        return choice

    def roll(self, die_index: int, label: str, prompt: Prompt) -> Tuple[int, int]:
        """
        Roll a die with a fair exchange over its faces.
        Returns:
            tuple: (face index, face value).
        """
        die = self.dice[die_index]
        face_index = self._exchange(len(die), label, prompt).result
        face = die[face_index]
        self._emit({"type": "Rolled", "label": label, "die": die_index, "face": face})
        return face_index, face

    def play_round(self, user_index: int, prompt: Prompt) -> RoundState:
        """
        Play one full round: record the user's die, select the computer's die, roll both
        (in first-move order) and resolve the winner.
        Args:
            user_index (int): The user's die index.
            prompt (callable): Counterparty prompt, used for every exchange in the round.
        Returns:
            RoundState: The ended round.
        Raises:
            IllegalMoveError: If user_index is not a die index.
        """
        self._check_die_index(user_index)
        self.start_new_round()
        self.choose_user_die(user_index)
        self.select_computer_die(user_index, prompt)
        self._snapshot(step="DiceChosen")

        s = self.state
        s.status = "ROLLING"
        if s.user_starts is False:
            s.computer_roll, s.computer_face = self.roll(s.computer_die, COMPUTER_ROLL_LABEL, prompt)
            s.user_roll, s.user_face = self.roll(s.user_die, USER_ROLL_LABEL, prompt)
        else:
            s.user_roll, s.user_face = self.roll(s.user_die, USER_ROLL_LABEL, prompt)
            s.computer_roll, s.computer_face = self.roll(s.computer_die, COMPUTER_ROLL_LABEL, prompt)
        self._resolve()
        return s

    def _resolve(self) -> None:
        """
        Internal: Compare the rolled faces, set the winner and end the round.
        """
        s = self.state
        if s.user_face > s.computer_face:
            s.winner = "user"
        elif s.user_face < s.computer_face:
            s.winner = "computer"
        else:
            s.winner = "draw"
        s.status = "ENDED"
        self._emit({"type": "RoundEnded", "winner": s.winner, "user_face": s.user_face,
                    "computer_face": s.computer_face})
        self._snapshot(step="RoundEnded")

    def is_terminal(self) -> bool:
        """
        Returns True if the current round has ended.
        """
        return self.state.status == "ENDED"
