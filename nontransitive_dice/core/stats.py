
"""
stats.py
Goodness-of-fit helpers used to check that fair exchange results are uniform.
Related modules:
- scripts/run_experiments.py: Reports the statistic for simulated exchanges.
"""

import math
from typing import Dict, Iterable, List

# Standard normal quantiles for the significance levels used by the uniformity checks.
_Z_UPPER = {0.05: 1.6449, 0.01: 2.3263, 0.001: 3.0902}


def histogram(values: Iterable[int], max_value: int) -> List[int]:
    """
    Count occurrences of each value in [0, max_value).
    """
    counts = [0] * max_value
    for v in values:
        counts[v] += 1
    return counts


def chi_square_uniform(counts: List[int]) -> float:
    """
    Pearson's chi-square statistic of observed counts against a uniform expectation.
    """
    total = sum(counts)
    if total == 0:
        raise ValueError("no observations")
    expected = total / len(counts)
    return sum((c - expected) ** 2 / expected for c in counts)


def chi_square_critical(df: int, alpha: float = 0.001) -> float:
    """
    Upper critical value of the chi-square distribution (Wilson-Hilferty approximation).
    Args:
        df (int): Degrees of freedom.
        alpha (float): Significance level, one of 0.05, 0.01, 0.001.
    """
    if alpha not in _Z_UPPER:
        raise ValueError(f"alpha must be one of {sorted(_Z_UPPER)}")
    z = _Z_UPPER[alpha]
    a = 2.0 / (9.0 * df)
    return df * (1.0 - a + z * math.sqrt(a)) ** 3


def uniformity_report(counts: List[int], alpha: float = 0.001) -> Dict[str, float]:
    """
    Summarize a uniformity check.
    Returns:
        dict: observations, statistic, critical value, degrees of freedom and whether it passes.
    """
    df = len(counts) - 1
    stat = chi_square_uniform(counts)
    critical = chi_square_critical(df, alpha)
    return {
        "observations": sum(counts),
        "df": df,
        "statistic": stat,
        "critical": critical,
        "alpha": alpha,
        "uniform": stat < critical,
    }
