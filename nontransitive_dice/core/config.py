
"""
config.py
Defines the GameConfig dataclass, which centralizes the numeric constants of the dice game and the fairness protocol.
Related modules:
- dice.py: Uses GameConfig to validate dice configurations.
- fairness.py: Uses GameConfig for key size and sampling width.
- engine.py: Uses GameConfig to size fair rolls.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes the constants of a non-transitive dice game.
    Fields:
        faces_per_die (int): Number of faces every die must have.
        min_dice (int): Minimum number of dice in a configuration.
        key_bytes (int): Size of the HMAC key generated for each commitment.
        sample_bits (int): Width of the raw random draw used by the rejection sampler.
    """
    faces_per_die: int = 6
    min_dice: int = 3
    key_bytes: int = 32
    sample_bits: int = 32


DEFAULT_CONFIG = GameConfig()
