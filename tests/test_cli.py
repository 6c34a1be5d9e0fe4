import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock
from UI import cli
from nontransitive_dice.core import fairness
from nontransitive_dice.core.dice import parse_dice
from nontransitive_dice.core.fairness import verify_commitment
from nontransitive_dice.persistence import csv_io


CLASSIC = ["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"]


class ScriptedInput:
    """
    Stand-in for input(): answers exchange prompts with a fixed number, die prompts with a fixed die,
    and menu prompts from a script.
    """
    def __init__(self, menu, die="0", number="0"):
        self.menu = list(menu)
        self.die = die
        self.number = number
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if prompt.startswith("Enter your number"):
            return self.number
        if prompt.startswith("Select your die"):
            return self.die
        return self.menu.pop(0)


class TestCli(unittest.TestCase):
    def test_prompt_int_retries_until_valid(self):
        answers = iter(["x", "9", "-1", "", " 3 "])
        out = io.StringIO()
        with redirect_stdout(out):
            value = cli.prompt_int(6, lambda _: next(answers))
        self.assertEqual(value, 3)
        self.assertEqual(out.getvalue().count("Invalid input"), 4)

    def test_probability_table(self):
        table = cli.format_probability_table(parse_dice(CLASSIC))
        self.assertIn("55.6%", table)
        self.assertIn("44.4%", table)
        self.assertIn("Dice", table)
        self.assertTrue(table.startswith("+"))

    def test_session_help_play_exit(self):
        fake = ScriptedInput(menu=["1", "2", "7", "0"])
        out = io.StringIO()
        with redirect_stdout(out):
            engine = cli.run_game(parse_dice(CLASSIC), input_fn=fake)
        text = out.getvalue()
        self.assertIn("Die 0: 2, 2, 4, 4, 9, 9", text)
        self.assertIn("[First move] Computer committed number HMAC:", text)
        self.assertIn("Computer secret key:", text)
        self.assertIn("55.6%", text)
        self.assertIn("Computer chose die:", text)
        self.assertIn("Unknown option. Try again.", text)
        self.assertTrue(text.rstrip().endswith("Game ended."))
        self.assertTrue(engine.is_terminal())
        self.assertNotEqual(engine.state.computer_die, 0)
        self.assertTrue(any(w in text for w in ("You win!", "Computer wins!", "It's a draw!")))

    def test_die_menu_exit_and_invalid(self):
        for die, message in (("3", "Exiting to main menu."), ("9", "Invalid die selection."), ("a", "Invalid die selection.")):
            with self.subTest(die=die):
                fake = ScriptedInput(menu=["2", "0"], die=die)
                out = io.StringIO()
                with redirect_stdout(out):
                    engine = cli.run_game(parse_dice(CLASSIC), input_fn=fake)
                self.assertIn(message, out.getvalue())
                self.assertEqual(engine.state.round_index, 0)

    def test_transcript_is_verifiable(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "exchanges.csv")
            fake = ScriptedInput(menu=["2", "0"], number="1")
            with redirect_stdout(io.StringIO()):
                cli.run_game(parse_dice(CLASSIC), transcript=path, input_fn=fake)
            rows = csv_io.read_rows_from_csv(path)
        self.assertGreaterEqual(len(rows), 4)
        self.assertEqual(rows[0]["label"], "First move")
        self.assertEqual(len({r["game_id"] for r in rows}), 1)
        for row in rows:
            self.assertTrue(verify_commitment(row["digest"], row["key"], int(row["secret"])))
            self.assertEqual(row["counterparty_value"], "1")

    def test_invalid_configuration_exits_before_any_exchange(self):
        bad_configs = [
            CLASSIC[:2],
            ["1,2,3,4,5", CLASSIC[1], CLASSIC[2]],
            ["1,2,3,4,5,6,7", CLASSIC[1], CLASSIC[2]],
            ["1,2,x,4,5,6", CLASSIC[1], CLASSIC[2]],
        ]
        for argv in bad_configs:
            with self.subTest(argv=argv):
                out = io.StringIO()
                with mock.patch.object(fairness, "commit") as commit, redirect_stdout(out):
                    status = cli.main(argv)
                self.assertEqual(status, 1)
                commit.assert_not_called()
                self.assertIn("Error:", out.getvalue())
                self.assertIn("Example:", out.getvalue())

    def test_negative_leading_face_is_a_die(self):
        dice = ["-1,2,3,4,5,6", "1,1,6,6,8,8", "3,3,5,5,7,7"]
        out = io.StringIO()
        with mock.patch("builtins.input", side_effect=EOFError), redirect_stdout(out):
            status = cli.main(dice)
        self.assertEqual(status, 0)
        self.assertIn("Die 0: -1, 2, 3, 4, 5, 6", out.getvalue())
        self.assertIn("Game interrupted.", out.getvalue())

    def test_flags_mixed_with_dice_keep_die_order(self):
        args = cli.parse_args(["--verbose", "-5,0,0,1,1,1", "--transcript", "t.csv", CLASSIC[0], "--", "-2,2,2,2,2,2"])
        self.assertTrue(args.verbose)
        self.assertEqual(args.transcript, "t.csv")
        self.assertEqual(args.dice, ["-5,0,0,1,1,1", CLASSIC[0], "-2,2,2,2,2,2"])

    def test_prompt_int_rejects_digit_separators(self):
        answers = iter(["0_1", "１", "+1"])
        out = io.StringIO()
        with redirect_stdout(out):
            value = cli.prompt_int(6, lambda _: next(answers))
        self.assertEqual(value, 1)
        self.assertEqual(out.getvalue().count("Invalid input"), 2)

    def test_main_handles_end_of_input(self):
        out = io.StringIO()
        with mock.patch("builtins.input", side_effect=EOFError), redirect_stdout(out):
            status = cli.main(CLASSIC)
        self.assertEqual(status, 0)
        self.assertIn("Game interrupted.", out.getvalue())


if __name__ == '__main__':
    unittest.main()
