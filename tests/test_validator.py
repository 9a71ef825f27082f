import unittest

from wordle_party.errors import ValidationError
from wordle_party.services.validator import WordValidator, is_valid_word, normalize_guess


class TestNormalizeGuess(unittest.TestCase):
    def test_strips_and_uppercases(self) -> None:
        self.assertEqual(normalize_guess("  crane "), "CRANE")

    def test_turkish_dotted_i(self) -> None:
        self.assertEqual(normalize_guess("kitap", "tr"), "KİTAP")
        self.assertEqual(normalize_guess("balık", "tr"), "BALIK")

    def test_english_i_is_plain(self) -> None:
        self.assertEqual(normalize_guess("image", "en"), "IMAGE")

    def test_non_string_input(self) -> None:
        self.assertEqual(normalize_guess(None), "")
        self.assertEqual(normalize_guess(12345), "")


class TestIsValidWord(unittest.TestCase):
    corpus = frozenset({"CRANE", "HOUSE"})

    def test_case_insensitive_membership(self) -> None:
        self.assertTrue(is_valid_word("crane", self.corpus))
        self.assertTrue(is_valid_word("HoUsE", self.corpus))

    def test_wrong_length(self) -> None:
        self.assertFalse(is_valid_word("CRAN", self.corpus))
        self.assertFalse(is_valid_word("CRANES", self.corpus))

    def test_not_in_corpus(self) -> None:
        self.assertFalse(is_valid_word("WATER", self.corpus))

    def test_malformed_input(self) -> None:
        self.assertFalse(is_valid_word(None, self.corpus))
        self.assertFalse(is_valid_word("", self.corpus))

    def test_lower_case_corpus(self) -> None:
        corpus = {"crane", "Lucky"}
        self.assertTrue(is_valid_word("crane", corpus))
        self.assertTrue(is_valid_word("CRANE", corpus))
        self.assertTrue(is_valid_word("lucky", corpus))
        self.assertFalse(is_valid_word("water", corpus))

    def test_lower_case_turkish_corpus(self) -> None:
        self.assertTrue(is_valid_word("KİTAP", {"kitap"}, "tr"))


class TestWordValidator(unittest.TestCase):
    def test_default_english_dictionary(self) -> None:
        validator = WordValidator()
        self.assertTrue(validator.is_valid("crane"))
        self.assertFalse(validator.is_valid("zzzzz"))

    def test_check_returns_normalized_word(self) -> None:
        self.assertEqual(WordValidator("en").check(" water"), "WATER")

    def test_check_wrong_length(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            WordValidator("en").check("cat")
        self.assertEqual(ctx.exception.reason, "wrong_length")

    def test_check_not_in_word_list(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            WordValidator("en").check("zzzzz")
        self.assertEqual(ctx.exception.reason, "not_in_word_list")

    def test_check_none(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            WordValidator("en").check(None)
        self.assertEqual(ctx.exception.reason, "wrong_length")

    def test_turkish_dictionary(self) -> None:
        validator = WordValidator("tr")
        self.assertEqual(validator.check("insan"), "İNSAN")
        self.assertTrue(validator.is_valid("çiçek"))
        self.assertFalse(validator.is_valid("crane"))

    def test_dictionaries_are_per_language(self) -> None:
        self.assertFalse(WordValidator("en").is_valid("kitap"))

    def test_custom_corpus_is_normalized(self) -> None:
        validator = WordValidator("en", corpus=["llama", "Lucky"])
        self.assertTrue(validator.is_valid("LLAMA"))
        self.assertTrue(validator.is_valid("lucky"))
        self.assertFalse(validator.is_valid("crane"))


if __name__ == "__main__":
    unittest.main()
