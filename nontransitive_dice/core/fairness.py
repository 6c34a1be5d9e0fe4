
"""
fairness.py
Implements the commit-reveal fair randomness protocol: the computer commits to a secret number with
HMAC-SHA3-256, the counterparty contributes a number, the secret and key are revealed, and the result is
(secret + contribution) mod max. Any outside verifier can recompute the digest from the revealed values.
Related modules:
- config.py: GameConfig supplies key size and sampling width.
- engine.py: Runs one exchange per random decision in a round.
- persistence/recorder.py: Optional recorder for the exchange transcript.
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .config import DEFAULT_CONFIG, GameConfig
from .dice import parse_int_token
from ..persistence.events import ExchangeEvent

logger = logging.getLogger(__name__)

# Fixed; not part of GameConfig.
HASH_FUNCTION = hashlib.sha3_256

RandBytes = Callable[[int], bytes]
Prompt = Callable[[Dict[str, Any]], Any]


class ProtocolError(Exception):
    """
    Raised when the exchange is driven out of order or a commitment is reused.
    These indicate a defect in the caller, never bad user input.
    """
    pass


class ProtocolOrderError(ProtocolError):
    """
    Raised when a step runs before its predecessor, e.g. reveal before the counterparty's value is fixed.
    """
    pass


class ProtocolInvariantViolation(ProtocolError):
    """
    Raised when a revealed secret and key do not reproduce the disclosed digest.
    """
    pass


class InputValidationError(ValueError):
    """
    Raised when the counterparty's value is not an integer in [0, max). Recoverable: ask again.
    """
    pass


def secure_random_int(max_value: int, bits: int = 32, randbytes: Optional[RandBytes] = None) -> int:
    """
    Draw an unbiased integer in [0, max_value) by rejection sampling.
    A `bits`-wide value is drawn; draws falling in the trailing incomplete bucket
    (>= 2**bits - 2**bits % max_value) are discarded before reducing modulo max_value.
    Args:
        max_value (int): Exclusive upper bound, 1 <= max_value <= 2**bits.
        bits (int): Width of each raw draw, a multiple of 8.
        randbytes (callable, optional): Byte source; defaults to secrets.token_bytes.
    Returns:
        int: Uniform value in [0, max_value).
    """
    if bits <= 0 or bits % 8:
        raise ValueError("bits must be a positive multiple of 8")
    space = 1 << bits
    if not 1 <= max_value <= space:
        raise ValueError(f"max_value must be between 1 and {space}, got {max_value}")
    randbytes = randbytes or secrets.token_bytes
    limit = space - (space % max_value)
    while True:
        draw = int.from_bytes(randbytes(bits // 8), "big")
        if draw < limit:
            return draw % max_value


def hmac_digest(key: bytes, secret: int) -> str:
    """
    HMAC-SHA3-256 of the secret's base-10 ASCII representation, as lowercase hex.
    """
    return hmac.new(key, str(secret).encode("ascii"), HASH_FUNCTION).hexdigest()


def verify_commitment(digest: str, key: Union[bytes, str], secret: int) -> bool:
    """
    Check a revealed (secret, key) pair against a previously disclosed digest.
    Args:
        digest (str): Disclosed digest, hex (case-insensitive).
        key (bytes|str): Revealed key, raw bytes or hex string.
        secret (int): Revealed secret.
    Returns:
        bool: True if the digest matches.
    """
    if isinstance(key, str):
        key = bytes.fromhex(key)
    return hmac.compare_digest(hmac_digest(key, secret), digest.strip().lower())


@dataclass
class Commitment:
    """
    A single-use commitment to a secret number.
    Only `digest` may be shown to the counterparty before reveal; `secret` and `key` are withheld
    and excluded from repr.
    Fields:
        max_value (int): Exclusive bound of the secret.
        digest (str): HMAC-SHA3-256(key, str(secret)) as lowercase hex.
        label (str): What this exchange decides, for display.
        secret (int): Withheld secret in [0, max_value).
        key (bytes): Withheld HMAC key.
        revealed (bool): True once reveal() has consumed the commitment.
    """
    max_value: int
    digest: str
    label: str = ""
    secret: int = field(default=0, repr=False)
    key: bytes = field(default=b"", repr=False)
    revealed: bool = False


@dataclass(frozen=True)
class Reveal:
    """
    The withheld half of a commitment, disclosed after the counterparty has contributed.
    """
    secret: int
    key: bytes

    @property
    def key_hex(self) -> str:
        return self.key.hex()


@dataclass(frozen=True)
class ExchangeResult:
    """
    Full record of one completed exchange, enough for anyone to verify it.
    Fields:
        label (str): What the exchange decided.
        max_value (int): Modulus of the exchange.
        digest (str): Digest disclosed before the counterparty contributed.
        secret (int): Computer's revealed secret.
        key_hex (str): Computer's revealed key, lowercase hex.
        counterparty_value (int): Value contributed by the counterparty.
        result (int): (secret + counterparty_value) mod max_value.
    """
    label: str
    max_value: int
    digest: str
    secret: int
    key_hex: str
    counterparty_value: int
    result: int


def commit(max_value: int, label: str = "", config: Optional[GameConfig] = None,
           randbytes: Optional[RandBytes] = None) -> Commitment:
    """
    Create a fresh commitment for an exchange over [0, max_value).
    Args:
        max_value (int): Number of outcomes, at least 2.
        label (str): What this exchange decides.
        config (GameConfig, optional): Supplies key size and sampling width.
        randbytes (callable, optional): Byte source; defaults to secrets.token_bytes.
    Returns:
        Commitment: With the digest ready to disclose.
    Raises:
        ValueError: If max_value is not an integer >= 2.
    """
    if isinstance(max_value, bool) or not isinstance(max_value, int) or max_value < 2:
        raise ValueError(f"max_value must be an integer >= 2, got {max_value!r}")
    config = config or DEFAULT_CONFIG
    randbytes = randbytes or secrets.token_bytes
    secret = secure_random_int(max_value, config.sample_bits, randbytes)
    key = randbytes(config.key_bytes)
    digest = hmac_digest(key, secret)
    logger.debug("Committed [%s] over %d outcomes: %s", label, max_value, digest)
    return Commitment(max_value=max_value, digest=digest, label=label, secret=secret, key=key)


def reveal(commitment: Commitment) -> Reveal:
    """
    Disclose the withheld secret and key, checking they still reproduce the digest.
    Args:
        commitment (Commitment): A commitment that has not been revealed yet.
    Returns:
        Reveal: The secret and key.
    Raises:
        ProtocolError: If the commitment was already revealed.
        ProtocolInvariantViolation: If the recomputed digest differs from the disclosed one.
    """
    if commitment.revealed:
        raise ProtocolError("Commitment has already been revealed")
    if not verify_commitment(commitment.digest, commitment.key, commitment.secret):
        raise ProtocolInvariantViolation(
            f"Revealed values do not match digest {commitment.digest} [{commitment.label}]"
        )
    commitment.revealed = True
    return Reveal(secret=commitment.secret, key=commitment.key)


def combine(secret: int, counterparty_value: int, max_value: int) -> int:
    """
    (secret + counterparty_value) mod max_value. Uniform whenever either side is uniform and independent.
    """
    if not 0 <= secret < max_value:
        raise ValueError(f"secret {secret} out of range [0, {max_value})")
    if not 0 <= counterparty_value < max_value:
        raise ValueError(f"counterparty value {counterparty_value} out of range [0, {max_value})")
    return (secret + counterparty_value) % max_value


def parse_contribution(value: Any, max_value: int) -> int:
    """
    Validate a counterparty contribution.
    Args:
        value: An int, or a string holding a base-10 integer.
        max_value (int): Exclusive upper bound.
    Returns:
        int: The contribution.
    Raises:
        InputValidationError: If value is not an integer in [0, max_value).
    """
    if isinstance(value, bool):
        raise InputValidationError(f"Enter an integer between 0 and {max_value - 1}.")
    if isinstance(value, str):
        value = parse_int_token(value)
    if not isinstance(value, int) or not 0 <= value < max_value:
        raise InputValidationError(f"Enter an integer between 0 and {max_value - 1}.")
    return value


class FairExchange:
    """
    State machine for one commit-reveal exchange: COMMITTED -> CONTRIBUTED -> REVEALED -> COMBINED.
    The commitment is created on construction. The counterparty only ever sees get_view(), which carries
    the digest but not the secret or key. reveal() refuses to run until contribute() has fixed the
    counterparty's value.
    """
    def __init__(self, max_value: int, label: str = "", config: Optional[GameConfig] = None,
                 randbytes: Optional[RandBytes] = None, recorder=None, game_id: Optional[str] = None):
        """
        Args:
            max_value (int): Number of outcomes, at least 2.
            label (str): What this exchange decides.
            config (GameConfig, optional): Protocol configuration.
            randbytes (callable, optional): Byte source for the secret and key.
            recorder (InMemoryRecorder, optional): Receives an ExchangeEvent per step.
            game_id (str, optional): Identifier stamped on recorded events.
        """
        self.label = label
        self.max_value = max_value
        self.recorder = recorder
        self.game_id = game_id
        self._commitment = commit(max_value, label, config, randbytes)
        self._reveal: Optional[Reveal] = None
        self.counterparty_value: Optional[int] = None
        self.status = "COMMITTED"
        self._events: List[Dict] = []
        self._emit({"type": "Committed", "max_value": max_value, "digest": self.digest})

    @property
    def digest(self) -> str:
        return self._commitment.digest

    def _emit(self, event: Dict):
        """
        Internal: Record an event dict, and forward it to the recorder if one is attached.
        """
        self._events.append(event)
        if self.recorder is not None:
            payload = {k: v for k, v in event.items() if k != "type"}
            self.recorder.record(ExchangeEvent(self.game_id, event["type"], payload, self.label))

    def pop_events(self):
        """
        Return and clear all emitted events since last call.
        """
        ev = list(self._events)
        self._events.clear()
        return ev

    def get_events(self):
        """
        Return all events emitted so far (does not clear).
        """
        return list(self._events)

    def get_view(self) -> Dict[str, Any]:
        """
        What the counterparty may see before contributing.
        Returns:
            dict: label, max_value and digest.
        """
        return {"label": self.label, "max_value": self.max_value, "digest": self.digest}

    def contribute(self, value: Any) -> int:
        """
        Fix the counterparty's value. An invalid value leaves the exchange untouched so the
        caller can ask again against the same commitment.
        Raises:
            ProtocolOrderError: If a value was already fixed.
            InputValidationError: If value is not an integer in [0, max_value).
        """
        if self.status != "COMMITTED":
            raise ProtocolOrderError(f"Cannot contribute in state {self.status}")
        try:
            parsed = parse_contribution(value, self.max_value)
        except InputValidationError:
            self._emit({"type": "ContributionRejected", "value": repr(value)})
            raise
        self.counterparty_value = parsed
        self.status = "CONTRIBUTED"
        self._emit({"type": "ContributionRecorded", "value": parsed})
        return parsed

    def reveal(self) -> Reveal:
        """
        Disclose the secret and key. Only legal once the counterparty's value is fixed.
        Raises:
            ProtocolOrderError: If called before contribute() or twice.
            ProtocolInvariantViolation: If the revealed values do not reproduce the digest.
        """
        if self.status != "CONTRIBUTED":
            raise ProtocolOrderError(f"Cannot reveal in state {self.status}")
        self._reveal = reveal(self._commitment)
        self.status = "REVEALED"
        self._emit({"type": "Revealed", "secret": self._reveal.secret, "key": self._reveal.key_hex})
        return self._reveal

    def combine(self) -> ExchangeResult:
        """
        Produce the exchange result from the revealed secret and the fixed contribution.
        Raises:
            ProtocolOrderError: If called before reveal().
        """
        if self.status != "REVEALED":
            raise ProtocolOrderError(f"Cannot combine in state {self.status}")
        result = combine(self._reveal.secret, self.counterparty_value, self.max_value)
        self.status = "COMBINED"
        self._emit({"type": "Combined", "result": result})
        logger.debug("Exchange [%s] combined to %d", self.label, result)
        return ExchangeResult(
            label=self.label,
            max_value=self.max_value,
            digest=self.digest,
            secret=self._reveal.secret,
            key_hex=self._reveal.key_hex,
            counterparty_value=self.counterparty_value,
            result=result,
        )


def fair_random(max_value: int, label: str, prompt: Prompt, config: Optional[GameConfig] = None,
                recorder=None, randbytes: Optional[RandBytes] = None,
                game_id: Optional[str] = None) -> ExchangeResult:
    """
    Run one full exchange and return a value in [0, max_value) neither party could bias.
    Steps: commit, show the digest to the counterparty through prompt(view), keep asking until the
    value is valid (same commitment), reveal, combine.
    Args:
        max_value (int): Number of outcomes, at least 2.
        label (str): What the exchange decides.
        prompt (callable): prompt(view) -> value; view holds label, max_value and digest only.
        config (GameConfig, optional): Protocol configuration.
        recorder (InMemoryRecorder, optional): Receives ExchangeEvents.
        randbytes (callable, optional): Byte source for secret and key.
        game_id (str, optional): Identifier stamped on recorded events.
    Returns:
        ExchangeResult: Result plus everything needed to verify it.
    """
    exchange = FairExchange(max_value, label, config=config, randbytes=randbytes,
                            recorder=recorder, game_id=game_id)
    while True:
        value = prompt(exchange.get_view())
        try:
            exchange.contribute(value)
            break
        except InputValidationError as e:
            logger.debug("Rejected contribution %r for [%s]: %s", value, label, e)
    exchange.reveal()
    return exchange.combine()
