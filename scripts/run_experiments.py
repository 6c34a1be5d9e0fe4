"""
Run a batch of fair randomness exchanges against each counterparty, check the results for uniformity,
save a JSON summary and a frequency chart.
Usage: python scripts/run_experiments.py --agents all --exchanges 6000 --max-value 6 --data-dir results
"""
import os
import argparse
import datetime
from typing import Any, Dict, List

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from nontransitive_dice.agents import AGENT_MAP
from nontransitive_dice.core.fairness import fair_random
from nontransitive_dice.core.stats import histogram, uniformity_report
from nontransitive_dice.persistence import csv_io, serializer


def run_exchanges(agent_key: str, exchanges: int, max_value: int, game_id: str) -> Dict[str, Any]:
    """
    Run `exchanges` fair exchanges over [0, max_value) with the named counterparty.
    Args:
        agent_key (str): Key into AGENT_MAP.
        exchanges (int): Number of exchanges.
        max_value (int): Modulus of each exchange.
        game_id (str): Identifier written to transcript rows.
    Returns:
        dict: counts, uniformity report and transcript rows.
    """
    counterparty = AGENT_MAP[agent_key]()
    results = []
    rows = []
    for i in range(exchanges):
        result = fair_random(max_value, f"{agent_key} #{i}", counterparty, game_id=game_id)
        results.append(result.result)
        rows.append(csv_io.transcript_row(result, game_id, datetime.datetime.now(datetime.timezone.utc).isoformat()))
    counts = histogram(results, max_value)
    return {
        "agent": agent_key,
        "counts": counts,
        "report": uniformity_report(counts),
        "rows": rows,
    }


def plot_counts(runs: List[Dict[str, Any]], max_value: int, out_path: str):
    width = 0.8 / max(1, len(runs))
    plt.figure(figsize=(max(6, max_value * 0.8), 4))
    for k, run in enumerate(runs):
        xs = [v + k * width for v in range(max_value)]
        plt.bar(xs, run["counts"], width=width, label=run["agent"])
    expected = sum(runs[0]["counts"]) / max_value if runs else 0
    plt.axhline(expected, color='k', linestyle='--', linewidth=1, label='expected')
    plt.xlabel('Exchange result')
    plt.ylabel('Count')
    plt.title(f'Fair exchange results over [0, {max_value})')
    plt.legend(fontsize=8)
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()


def parse_agent_list(s: str) -> List[str]:
    if s.strip().lower() == 'all':
        return sorted(list(AGENT_MAP.keys()))
    return [x.strip() for x in s.split(',') if x.strip()]


def main():
    parser = argparse.ArgumentParser(description='Check fair exchange results for uniformity against each counterparty')
    parser.add_argument('--agents', type=str, default='all', help='Comma-separated list of agent keys from AGENT_MAP or "all"')
    parser.add_argument('--exchanges', type=int, default=6000, help='Number of exchanges per agent')
    parser.add_argument('--max-value', type=int, default=6, help='Modulus of each exchange')
    parser.add_argument('--data-dir', type=str, default='results', help='Directory to save csv, json and charts')
    args = parser.parse_args()

    agent_keys = parse_agent_list(args.agents)
    unknown = [a for a in agent_keys if a not in AGENT_MAP]
    if unknown:
        raise SystemExit(f"Unknown agents: {unknown}. Supported: {list(AGENT_MAP.keys())}")

    os.makedirs(args.data_dir, exist_ok=True)
    transcript_csv = os.path.join(args.data_dir, 'exchanges.csv')
    summary_path = os.path.join(args.data_dir, 'uniformity_summary.json')
    chart_png = os.path.join(args.data_dir, 'exchange_results.png')
    game_id = datetime.datetime.now(datetime.timezone.utc).strftime('exp_%Y%m%dT%H%M%S')

    runs = []
    for key in agent_keys:
        print(f"Running {args.exchanges} exchanges against {key}...", end=' ')
        run = run_exchanges(key, args.exchanges, args.max_value, game_id)
        csv_io.append_rows_to_csv(run.pop("rows"), transcript_csv, csv_io.get_transcript_header())
        runs.append(run)
        print('uniform' if run["report"]["uniform"] else 'NOT uniform')

    with open(summary_path, "w", encoding="utf-8") as f:
        f.write(serializer.dumps({"max_value": args.max_value, "runs": runs}, indent=2))
    plot_counts(runs, args.max_value, chart_png)

    print(f"Exchanges saved to {transcript_csv}")
    print(f"Summary: {summary_path}")
    print(f"Chart: {chart_png}")


if __name__ == '__main__':
    main()
