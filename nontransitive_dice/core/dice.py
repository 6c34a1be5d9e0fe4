
"""
dice.py
Defines the Die and DieSet value types and the validation of user-supplied dice configurations.
Related modules:
- config.py: GameConfig supplies the face count and minimum number of dice.
- rules.py: Compares dice pairwise.
- engine.py: Reads faces of the dice chosen for a round.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, GameConfig

# ASCII digits only; int() alone also takes "1_0" and non-ASCII digits.
INTEGER_TOKEN = re.compile(r"[+-]?[0-9]+")


class ConfigurationError(ValueError):
    """
    Raised when the dice configuration is invalid (too few dice, wrong face count, non-integer face).
    """
    pass


def parse_int_token(text: str) -> Optional[int]:
    """
    Parse a base-10 integer token such as "-3" or " 12 ". Returns None if the token is anything else.
    """
    token = text.strip()
    if not INTEGER_TOKEN.fullmatch(token):
        return None
    return int(token)


def _to_face(value: Any) -> int:
    # bool is an int subclass but never a meaningful face
    if isinstance(value, bool):
        raise ConfigurationError(f"Face value {value!r} is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        face = parse_int_token(value)
        if face is not None:
            return face
    raise ConfigurationError(f"Face value {value!r} is not an integer")


@dataclass(frozen=True)
class Die:
    """
    An immutable die: an ordered tuple of integer faces. Faces may repeat and are not range-restricted.
    Args:
        faces (tuple[int]): Face values in roll-index order.
    """
    faces: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.faces)

    def __iter__(self) -> Iterator[int]:
        return iter(self.faces)

    def __getitem__(self, index: int) -> int:
        return self.faces[index]

    def __str__(self) -> str:
        return ",".join(str(f) for f in self.faces)


@dataclass(frozen=True)
class DieSet:
    """
    An immutable, validated collection of dice. Built once at startup and passed explicitly
    to the engine and the help table.
    Args:
        dice (tuple[Die]): The dice, addressed by index.
    """
    dice: Tuple[Die, ...]

    def __len__(self) -> int:
        return len(self.dice)

    def __iter__(self) -> Iterator[Die]:
        return iter(self.dice)

    def __getitem__(self, index: int) -> Die:
        return self.dice[index]


def make_die(raw_faces: Sequence[Any], config: Optional[GameConfig] = None) -> Die:
    """
    Validate a single die's faces.
    Args:
        raw_faces (sequence): Face values (ints or base-10 integer strings).
        config (GameConfig, optional): Game configuration.
    Returns:
        Die: The validated die.
    Raises:
        ConfigurationError: If the face count is wrong or a face is not an integer.
    """
    config = config or DEFAULT_CONFIG
    if isinstance(raw_faces, (str, bytes)):
        raise ConfigurationError("A die must be a sequence of faces, not a single string")
    faces = tuple(_to_face(v) for v in raw_faces)
    if len(faces) != config.faces_per_die:
        raise ConfigurationError(
            f"Each die must have exactly {config.faces_per_die} faces, got {len(faces)}"
        )
    return Die(faces)


def validate_dice(raw_dice: Sequence[Sequence[Any]], config: Optional[GameConfig] = None) -> DieSet:
    """
    Validate a full dice configuration.
    Args:
        raw_dice (sequence): One sequence of faces per die.
        config (GameConfig, optional): Game configuration.
    Returns:
        DieSet: The validated, immutable dice set.
    Raises:
        ConfigurationError: If fewer than config.min_dice dice are given, or any die is invalid.
    """
    config = config or DEFAULT_CONFIG
    raw_dice = list(raw_dice)
    if len(raw_dice) < config.min_dice:
        raise ConfigurationError(
            f"You must provide at least {config.min_dice} dice, got {len(raw_dice)}"
        )
    return DieSet(tuple(make_die(faces, config) for faces in raw_dice))


def parse_die(token: str, config: Optional[GameConfig] = None) -> Die:
    """
    Parse a comma separated die such as "2,2,4,4,9,9".
    Raises:
        ConfigurationError: On empty faces, non-integer faces or a wrong face count.
    """
    parts = token.split(",")
    if any(not p.strip() for p in parts):
        raise ConfigurationError(f"Die {token!r} contains an empty face")
    return make_die(parts, config)


def parse_dice(args: Sequence[str], config: Optional[GameConfig] = None) -> DieSet:
    """
    Parse and validate dice given as command-line tokens.
    Args:
        args (sequence[str]): One comma separated token per die.
        config (GameConfig, optional): Game configuration.
    Returns:
        DieSet: The validated dice set.
    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    config = config or DEFAULT_CONFIG
    args = list(args)
    if len(args) < config.min_dice:
        raise ConfigurationError(
            f"You must provide at least {config.min_dice} dice, got {len(args)}"
        )
    return DieSet(tuple(parse_die(a, config) for a in args))
