import argparse
import datetime
import hashlib
import logging
import os
import sys
from typing import Callable, Optional

from tabulate import tabulate

from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import ConfigurationError, DieSet, parse_dice, parse_int_token
from nontransitive_dice.core.engine import GameEngine, IllegalMoveError
from nontransitive_dice.core.fairness import ExchangeResult
from nontransitive_dice.core.rules import probability_matrix
from nontransitive_dice.persistence import csv_io

USAGE_EXAMPLE = "python -m UI.cli 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7"


def build_parser() -> argparse.ArgumentParser:
    # Dice are not declared as a positional: a die such as -1,2,3,4,5,6 looks like an option to argparse.
    # parse_args() collects them from the leftover tokens instead.
    parser = argparse.ArgumentParser(
        prog="python -m UI.cli",
        usage="%(prog)s [-h] [--transcript TRANSCRIPT] [--verbose] DIE DIE DIE [DIE ...]",
        description="Play non-transitive dice against the computer with provably fair rolls.",
        epilog="Each DIE is six comma separated integer faces, e.g. 2,2,4,4,9,9. Faces may be negative.",
    )
    parser.add_argument("--transcript", type=str, default=None,
                        help="CSV file to append every exchange to (digest, secret, key, result)")
    parser.add_argument("--verbose", action="store_true", help="Log protocol steps at DEBUG level")
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    """
    Parse the known flags and keep every other token, in order, as a die.
    """
    args, rest = build_parser().parse_known_args(argv)
    args.dice = [token for token in rest if token != "--"]
    return args


def prompt_int(max_value: int, input_fn: Optional[Callable[[str], str]] = None) -> int:
    """
    Ask for an integer in [0, max_value) until one is entered.
    Args:
        max_value (int): Exclusive upper bound.
        input_fn (callable): Line reader, input() by default.
    Returns:
        int: The validated integer.
    """
    input_fn = input_fn or input
    while True:
        raw = input_fn(f"Enter your number (0-{max_value - 1}): ").strip()
        value = parse_int_token(raw)
        if value is not None and 0 <= value < max_value:
            return value
        print(f"Invalid input. Enter an integer between 0 and {max_value - 1}.")


def make_console_prompt(input_fn: Optional[Callable[[str], str]] = None):
    """
    Build the counterparty prompt used by the engine: show the commitment, then read the user's number.
    """
    def console_prompt(view):
        print(f"\n[{view['label']}] Computer committed number HMAC: {view['digest']}")
        return prompt_int(view["max_value"], input_fn)
    return console_prompt


def print_exchange(result: ExchangeResult):
    """
    Print the revealed half of an exchange so the user can verify the HMAC.
    """
    print(f"Computer secret number: {result.secret}")
    print(f"Computer secret key: {result.key_hex}")
    print(f"You entered: {result.counterparty_value}")
    print(f"Result (computer + user) mod {result.max_value} = {result.result}\n")


def show_dice(dice_set: DieSet):
    print("Dice configurations:")
    for i, die in enumerate(dice_set):
        print(f"Die {i}: {', '.join(str(f) for f in die)}")


def format_probability_table(dice_set: DieSet) -> str:
    """
    Render the pairwise win probabilities (row die beats column die) as a grid table.
    """
    matrix = probability_matrix(dice_set)
    headers = ["Dice"] + [str(j) for j in range(len(dice_set))]
    rows = []
    for i, row in enumerate(matrix):
        rows.append([str(i)] + ["-" if p is None else f"{p:.1f}%" for p in row])
    return tabulate(rows, headers=headers, tablefmt="grid", disable_numparse=True)


def show_probabilities(dice_set: DieSet):
    print("Probability that the row die beats the column die:")
    print(format_probability_table(dice_set))


def choose_die(dice_set: DieSet, input_fn: Optional[Callable[[str], str]] = None) -> Optional[int]:
    """
    Ask the user for a die. Returns None to go back to the menu (exit option or invalid input).
    """
    input_fn = input_fn or input
    print("Choose your die:")
    for i, die in enumerate(dice_set):
        print(f"{i}: {', '.join(str(f) for f in die)}")
    print(f"{len(dice_set)}: Exit")
    raw = input_fn(f"Select your die (0-{len(dice_set)}): ").strip()
    index = parse_int_token(raw)
    if index is None or not 0 <= index <= len(dice_set):
        print("Invalid die selection.")
        return None
    if index == len(dice_set):
        print("Exiting to main menu.")
        return None
    return index


def play(engine: GameEngine, input_fn: Optional[Callable[[str], str]] = None):
    """
    Play a single round: the user picks a die, then every random decision is a fair exchange.
    """
    user_index = choose_die(engine.dice, input_fn)
    if user_index is None:
        return None
    try:
        state = engine.play_round(user_index, make_console_prompt(input_fn))
    except IllegalMoveError as e:
        print(f"Illegal move: {e}")
        return None
    print(f"Computer chose die: {state.computer_die}")
    print(f"You rolled face: {state.user_face}")
    print(f"Computer rolled face: {state.computer_face}")
    if state.winner == "user":
        print("You win!")
    elif state.winner == "computer":
        print("Computer wins!")
    else:
        print("It's a draw!")
    return state


def run_game(dice_set: DieSet, config: Optional[GameConfig] = None, transcript: Optional[str] = None,
             input_fn: Optional[Callable[[str], str]] = None):
    """
    Run the interactive session: show dice, decide the first move, then loop over the menu.
    Args:
        dice_set (DieSet): Validated dice.
        config (GameConfig, optional): Game configuration.
        transcript (str, optional): CSV path receiving every completed exchange.
        input_fn (callable): Line reader, input() by default.
    """
    input_fn = input_fn or input
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    raw_id = f"cli_{timestamp}_{os.getpid()}"
    game_id = hashlib.sha256(raw_id.encode()).hexdigest()[:16]

    def on_exchange(result: ExchangeResult):
        print_exchange(result)
        if transcript:
            row = csv_io.transcript_row(result, game_id, datetime.datetime.now(datetime.timezone.utc).isoformat())
            csv_io.append_row_to_csv(row, transcript, csv_io.get_transcript_header())

    engine = GameEngine(dice_set, config=config, game_id=game_id, on_exchange=on_exchange)
    show_dice(dice_set)

    user_starts = engine.decide_first_move(make_console_prompt(input_fn))
    print("You start first." if user_starts else "Computer starts first.")

    while True:
        print("\nMenu:\n0 - Exit\n1 - Help\n2 - Play")
        choice = input_fn("Choose an option: ").strip()
        if choice == "0":
            break
        if choice == "1":
            show_probabilities(dice_set)
            continue
        if choice == "2":
            play(engine, input_fn)
            continue
        print("Unknown option. Try again.")

    if transcript:
        print(f"[Exchanges saved to {transcript}]")
    print("Game ended.")
    return engine


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    config = GameConfig()
    try:
        dice_set = parse_dice(args.dice, config)
    except ConfigurationError as e:
        print(f"Error: {e}")
        print(f"Example: {USAGE_EXAMPLE}")
        return 1
    try:
        run_game(dice_set, config=config, transcript=args.transcript)
    except (KeyboardInterrupt, EOFError):
        print("\nGame interrupted.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
