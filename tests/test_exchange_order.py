import unittest
from unittest import mock
from nontransitive_dice.core import fairness
from nontransitive_dice.core.fairness import (
    FairExchange,
    InputValidationError,
    ProtocolOrderError,
    fair_random,
    verify_commitment,
)
from nontransitive_dice.persistence.recorder import InMemoryRecorder


class TestExchangeOrdering(unittest.TestCase):
    """
    Structural tests of exchange sequencing:
      - the counterparty sees only label, max_value and digest;
      - reveal never runs before the counterparty's value is recorded;
      - invalid contributions are retried against the same commitment.
    """

    def test_reveal_never_precedes_contribution(self):
        calls = []
        original_reveal = fairness.reveal

        def spy_reveal(commitment):
            calls.append("reveal")
            return original_reveal(commitment)

        def prompt(view):
            calls.append("prompt")
            return 1

        with mock.patch.object(fairness, "reveal", side_effect=spy_reveal):
            result = fair_random(6, "Your roll", prompt)
        self.assertEqual(calls, ["prompt", "reveal"])
        self.assertEqual(result.counterparty_value, 1)

    def test_recorded_event_sequence(self):
        recorder = InMemoryRecorder()
        fair_random(6, "Your roll", lambda view: 2, recorder=recorder, game_id="g1")
        self.assertEqual(recorder.event_types(), ["Committed", "ContributionRecorded", "Revealed", "Combined"])
        self.assertTrue(all(e.game_id == "g1" and e.label == "Your roll" for e in recorder.events()))

    def test_view_carries_no_secret(self):
        seen = []
        result = fair_random(6, "Computer roll", lambda view: seen.append(dict(view)) or 0)
        self.assertEqual(len(seen), 1)
        self.assertEqual(set(seen[0]), {"label", "max_value", "digest"})
        self.assertEqual(seen[0]["digest"], result.digest)
        self.assertEqual(seen[0]["max_value"], 6)

    def test_invalid_contributions_reuse_commitment(self):
        answers = iter(["x", -1, 6, True, 2.5, " 4 "])
        digests = []

        def prompt(view):
            digests.append(view["digest"])
            return next(answers)

        recorder = InMemoryRecorder()
        result = fair_random(6, "Your roll", prompt, recorder=recorder)
        self.assertEqual(result.counterparty_value, 4)
        self.assertEqual(len(digests), 6)
        self.assertEqual(len(set(digests)), 1)
        types = recorder.event_types()
        self.assertEqual(types.count("Committed"), 1)
        self.assertEqual(types.count("ContributionRejected"), 5)
        self.assertLess(types.index("ContributionRecorded"), types.index("Revealed"))

    def test_digit_separators_are_not_contributions(self):
        for bad in ["0_1", "１", "1e0"]:
            with self.subTest(value=bad):
                with self.assertRaises(InputValidationError):
                    fairness.parse_contribution(bad, 6)
        self.assertEqual(fairness.parse_contribution(" 5 ", 6), 5)

    def test_state_machine_rejects_out_of_order_steps(self):
        ex = FairExchange(6, "Your roll")
        with self.assertRaises(ProtocolOrderError):
            ex.reveal()
        with self.assertRaises(ProtocolOrderError):
            ex.combine()
        with self.assertRaises(InputValidationError):
            ex.contribute(9)
        self.assertEqual(ex.status, "COMMITTED")
        ex.contribute(3)
        with self.assertRaises(ProtocolOrderError):
            ex.contribute(3)
        with self.assertRaises(ProtocolOrderError):
            ex.combine()
        r = ex.reveal()
        with self.assertRaises(ProtocolOrderError):
            ex.reveal()
        result = ex.combine()
        self.assertEqual(ex.status, "COMBINED")
        self.assertEqual(result.result, (r.secret + 3) % 6)
        self.assertTrue(verify_commitment(result.digest, result.key_hex, result.secret))

    def test_exchange_events(self):
        ex = FairExchange(2, "First move")
        ex.contribute("1")
        ex.reveal()
        ex.combine()
        types = [e["type"] for e in ex.pop_events()]
        self.assertEqual(types, ["Committed", "ContributionRecorded", "Revealed", "Combined"])
        self.assertEqual(ex.get_events(), [])

    def test_abandoned_exchange_leaks_nothing(self):
        def prompt(view):
            raise KeyboardInterrupt

        with self.assertRaises(KeyboardInterrupt):
            fair_random(6, "Your roll", prompt)

    def test_input_validation_error_is_value_error(self):
        self.assertTrue(issubclass(InputValidationError, ValueError))


if __name__ == '__main__':
    unittest.main()
