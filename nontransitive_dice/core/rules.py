
"""
rules.py
Defines the dice comparison algebra: pairwise outcome counts, win probabilities and the win/lose/tie relation.
Related modules:
- dice.py: Die and DieSet are the operands.
- UI/cli.py: Renders probability_matrix as the help table.
"""

from enum import Enum
from typing import List, Optional, Tuple

from .dice import Die, DieSet


class Outcome(Enum):
    """Result of comparing one die against another over all face pairs."""
    WINS_AGAINST = "WinsAgainst"
    LOSES_AGAINST = "LosesAgainst"
    TIE = "Tie"


def count_outcomes(die_a: Die, die_b: Die) -> Tuple[int, int, int]:
    """
    Enumerate every ordered face pair (a, b) and count strict wins, strict losses and ties for die_a.
    Args:
        die_a (Die): The die whose perspective is counted.
        die_b (Die): The opposing die.
    Returns:
        tuple: (wins, losses, ties).
    """
    wins = losses = ties = 0
    for a in die_a:
        for b in die_b:
            if a > b:
                wins += 1
            elif a < b:
                losses += 1
            else:
                ties += 1
    return wins, losses, ties


def pairwise_win_probability(die_a: Die, die_b: Die) -> float:
    """
    Percentage of face pairs in which die_a rolls strictly higher than die_b, rounded to one decimal.
    Ties count for neither side, so P(A, B) + P(B, A) may be below 100.
    """
    wins, _, _ = count_outcomes(die_a, die_b)
    total = len(die_a) * len(die_b)
    return round(wins / total * 100, 1)


def compare_dice(die_a: Die, die_b: Die) -> Outcome:
    """
    Compare two dice by strict wins against strict losses.
    The relation is not transitive: a set may contain A > B > C > A.
    """
    wins, losses, _ = count_outcomes(die_a, die_b)
    if wins > losses:
        return Outcome.WINS_AGAINST
    if losses > wins:
        return Outcome.LOSES_AGAINST
    return Outcome.TIE


def probability_matrix(dice_set: DieSet) -> List[List[Optional[float]]]:
    """
    Build the full table of pairwise win probabilities (rows beat columns).
    Args:
        dice_set (DieSet): The dice in play.
    Returns:
        list[list[float|None]]: matrix[i][j] = P(die i beats die j); None on the diagonal.
    """
    n = len(dice_set)
    return [
        [None if i == j else pairwise_win_probability(dice_set[i], dice_set[j]) for j in range(n)]
        for i in range(n)
    ]
