
"""
csv_io.py
Persistence utilities for writing exchange transcripts and simulation results to CSV files.
"""

import os
import csv
from typing import Any, Dict, List

TRANSCRIPT_HEADER = [
    "game_id", "timestamp", "label", "max_value", "digest", "secret", "key",
    "counterparty_value", "result",
]
DUEL_HEADER = [
    "die_a", "die_b", "rounds", "wins_a", "wins_b", "draws",
    "observed_percent", "exact_percent",
]


def append_row_to_csv(row: Dict[str, Any], csv_path: str, header: List[str]):
    write_header = not os.path.exists(csv_path)
    with open(csv_path, "a", newline='', encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        if write_header:
            writer.writeheader()
        writer.writerow(row)


def append_rows_to_csv(rows: List[Dict[str, Any]], csv_path: str, header: List[str]):
    write_header = not os.path.exists(csv_path)
    with open(csv_path, "a", newline='', encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header)
        if write_header:
            writer.writeheader()
        for row in rows:
            writer.writerow(row)


def read_rows_from_csv(csv_path: str) -> List[Dict[str, str]]:
    with open(csv_path, newline='', encoding="utf-8") as f:
        return list(csv.DictReader(f))


def transcript_row(result, game_id: str, timestamp: str) -> Dict[str, Any]:
    """
    Flatten an ExchangeResult into a transcript row.
    """
    return {
        "game_id": game_id,
        "timestamp": timestamp,
        "label": result.label,
        "max_value": result.max_value,
        "digest": result.digest,
        "secret": result.secret,
        "key": result.key_hex,
        "counterparty_value": result.counterparty_value,
        "result": result.result,
    }


def get_transcript_header():
    return TRANSCRIPT_HEADER.copy()


def get_duel_header():
    return DUEL_HEADER.copy()
