import unittest
from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import ConfigurationError, Die, DieSet, parse_dice, parse_die, validate_dice


CLASSIC = ["2,2,4,4,9,9", "1,1,6,6,8,8", "3,3,5,5,7,7"]


class TestDiceValidation(unittest.TestCase):
    """
    Tests for building a DieSet from user configuration:
      - at least three dice, each with exactly six integer faces;
      - faces are not range-restricted and may repeat;
      - every failure is a ConfigurationError.
    """

    def test_classic_dice_parse(self):
        dice = parse_dice(CLASSIC)
        self.assertIsInstance(dice, DieSet)
        self.assertEqual(len(dice), 3)
        self.assertEqual(dice[0].faces, (2, 2, 4, 4, 9, 9))
        self.assertEqual(str(dice[1]), "1,1,6,6,8,8")

    def test_two_dice_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_dice(CLASSIC[:2])
        with self.assertRaises(ConfigurationError):
            validate_dice([[1, 2, 3, 4, 5, 6]] * 2)

    def test_wrong_face_count_rejected(self):
        with self.assertRaises(ConfigurationError):
            parse_dice(["1,2,3,4,5", CLASSIC[1], CLASSIC[2]])
        with self.assertRaises(ConfigurationError):
            parse_dice([CLASSIC[0], "1,2,3,4,5,6,7", CLASSIC[2]])

    def test_non_integer_token_rejected(self):
        for bad in ["1,2,x,4,5,6", "1,2,3.5,4,5,6", "1,2,,4,5,6", "1,2,3,4,5,"]:
            with self.subTest(token=bad):
                with self.assertRaises(ConfigurationError):
                    parse_dice([bad, CLASSIC[1], CLASSIC[2]])

    def test_only_plain_decimal_faces_accepted(self):
        for bad in ["1_0,2,3,4,5,6", "１,2,3,4,5,6", "0x1,2,3,4,5,6", "1 0,2,3,4,5,6"]:
            with self.subTest(token=bad):
                with self.assertRaises(ConfigurationError):
                    parse_dice([bad, CLASSIC[1], CLASSIC[2]])
        self.assertEqual(parse_die("+1,-2,3,4,5,6").faces, (1, -2, 3, 4, 5, 6))

    def test_non_integer_values_rejected(self):
        for bad in [1.5, True, None, "abc"]:
            with self.subTest(value=bad):
                with self.assertRaises(ConfigurationError):
                    validate_dice([[1, 2, 3, 4, 5, bad], [1] * 6, [2] * 6])

    def test_unrestricted_face_values(self):
        dice = validate_dice([[-5, 0, 0, 10 ** 12, 3, 3], [" 7", "-1", 2, 2, 2, 2], [1] * 6])
        self.assertEqual(dice[0].faces, (-5, 0, 0, 10 ** 12, 3, 3))
        self.assertEqual(dice[1].faces, (7, -1, 2, 2, 2, 2))

    def test_whitespace_around_faces_allowed(self):
        self.assertEqual(parse_die(" 1, 2 ,3,4,5, 6").faces, (1, 2, 3, 4, 5, 6))

    def test_configuration_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigurationError, ValueError))

    def test_die_set_is_immutable(self):
        dice = parse_dice(CLASSIC)
        with self.assertRaises(AttributeError):
            dice.dice = ()
        with self.assertRaises(AttributeError):
            dice[0].faces = (1, 1, 1, 1, 1, 1)
        self.assertIsInstance(dice.dice, tuple)
        self.assertIsInstance(dice[0], Die)

    def test_config_controls_limits(self):
        cfg = GameConfig(faces_per_die=4, min_dice=2)
        dice = parse_dice(["1,2,3,4", "4,3,2,1"], cfg)
        self.assertEqual(len(dice), 2)
        with self.assertRaises(ConfigurationError):
            parse_dice(["1,2,3,4,5,6", "1,2,3,4,5,6"], cfg)


if __name__ == '__main__':
    unittest.main()
