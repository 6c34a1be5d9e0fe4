"""
Run a round-robin of dice duels using fair rolls and compare observed win rates with the exact
pairwise probabilities. Saves a CSV and a chart.
Usage: python scripts/run_tournament.py --rounds 2000 --data-dir data 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7
"""
import os
import argparse
import itertools
from typing import Any, Dict, List

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from nontransitive_dice.agents import AGENT_MAP
from nontransitive_dice.core.dice import ConfigurationError, DieSet, parse_dice
from nontransitive_dice.core.engine import GameEngine
from nontransitive_dice.core.rules import pairwise_win_probability
from nontransitive_dice.persistence import csv_io

CLASSIC_DICE = ["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"]


def run_duel(engine: GameEngine, die_a: int, die_b: int, rounds: int, counterparty) -> Dict[str, Any]:
    """
    Roll die_a against die_b `rounds` times, each roll a fair exchange with the counterparty.
    Returns:
        dict: A duel row (see csv_io.DUEL_HEADER).
    """
    wins_a = wins_b = draws = 0
    for _ in range(rounds):
        _, face_a = engine.roll(die_a, f"Die {die_a} roll", counterparty)
        _, face_b = engine.roll(die_b, f"Die {die_b} roll", counterparty)
        if face_a > face_b:
            wins_a += 1
        elif face_a < face_b:
            wins_b += 1
        else:
            draws += 1
        engine.pop_events()
        engine.state.exchanges.clear()
    return {
        "die_a": die_a,
        "die_b": die_b,
        "rounds": rounds,
        "wins_a": wins_a,
        "wins_b": wins_b,
        "draws": draws,
        "observed_percent": f"{wins_a / rounds * 100.0:.1f}" if rounds else "0.0",
        "exact_percent": f"{pairwise_win_probability(engine.dice[die_a], engine.dice[die_b]):.1f}",
    }


def plot_duels(rows: List[Dict[str, Any]], out_path: str):
    labels = [f"{r['die_a']} v {r['die_b']}" for r in rows]
    observed = [float(r['observed_percent']) for r in rows]
    exact = [float(r['exact_percent']) for r in rows]
    xs = list(range(len(rows)))
    plt.figure(figsize=(max(6, int(len(rows) * 0.8)), 4))
    plt.bar([x - 0.2 for x in xs], observed, width=0.4, color='C0', label='observed')
    plt.bar([x + 0.2 for x in xs], exact, width=0.4, color='C1', label='exact')
    plt.xticks(xs, labels, rotation=45, ha='right', fontsize=8)
    plt.ylabel('Win percentage (%)')
    plt.ylim(0, 100)
    plt.title('Dice duels: observed vs exact win%')
    plt.legend(fontsize=8)
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()


def run_tournament(dice_set: DieSet, rounds: int, agent_key: str, data_dir: str):
    os.makedirs(data_dir, exist_ok=True)
    duel_csv = os.path.join(data_dir, 'duels.csv')
    chart_png = os.path.join(data_dir, 'duel_percentages.png')

    engine = GameEngine(dice_set)
    counterparty = AGENT_MAP[agent_key]()
    pairs = [(a, b) for a, b in itertools.product(range(len(dice_set)), repeat=2) if a != b]
    rows = []
    for k, (a, b) in enumerate(pairs, start=1):
        print(f"Running duel {k}/{len(pairs)}: die {a} vs die {b}...", end=' ')
        row = run_duel(engine, a, b, rounds, counterparty)
        rows.append(row)
        print(f"{row['observed_percent']}% (exact {row['exact_percent']}%)")

    csv_io.append_rows_to_csv(rows, duel_csv, csv_io.get_duel_header())
    plot_duels(rows, chart_png)
    print(f"Duels saved to {duel_csv}")
    print(f"Win percentage chart: {chart_png}")
    return rows


def main():
    parser = argparse.ArgumentParser(description='Round-robin dice duels with fair rolls')
    parser.add_argument('dice', nargs='*', default=CLASSIC_DICE, help='Dice as comma separated faces (at least 3)')
    parser.add_argument('--rounds', type=int, default=1000, help='Rolls per ordered pairing')
    parser.add_argument('--agent', type=str, default='random', help='Counterparty key from AGENT_MAP')
    parser.add_argument('--data-dir', type=str, default='data', help='Directory to save csv and charts')
    args = parser.parse_args()

    if args.agent not in AGENT_MAP:
        raise SystemExit(f"Unknown agent: {args.agent}. Supported: {list(AGENT_MAP.keys())}")
    try:
        dice_set = parse_dice(args.dice)
    except ConfigurationError as e:
        raise SystemExit(f"Error: {e}")

    run_tournament(dice_set, args.rounds, args.agent, args.data_dir)


if __name__ == '__main__':
    main()
