"""
Tests for comment text cleaning.
"""

import random
import re

import pytest

from reddit_sentiment_analysis import (
    AnalysisConfig,
    EncodingError,
    clean_comments,
    normalize_comment,
)

ALLOWED = re.compile(r"^[a-z' ]*$")


def random_text(seed: int, length: int = 80) -> str:
    """Random bytes read as latin-1 plus a sprinkle of emoji / accents."""
    rng = random.Random(seed)
    raw = bytes(rng.randrange(256) for _ in range(length)).decode("latin-1")
    extras = ["😂", "🚀", "é", "Ł", "’", "  ", "\n", "İ", "ß"]
    return raw + "".join(rng.choice(extras) for _ in range(8))


class TestNormalizeComment:

    def test_basic_cleaning(self):
        assert normalize_comment("I love bitcoin!!") == "i love bitcoin"

    def test_apostrophes_kept(self):
        assert normalize_comment("bitcoin CRASHED, I'm scared") == "bitcoin crashed i'm scared"

    def test_numbers_and_emoji_removed(self):
        assert normalize_comment("BTC to 100k 🚀🚀") == "btc to k "

    def test_double_space_joins_words(self):
        # literal single-pass replace of "  " with ""
        assert normalize_comment("to  the moon") == "tothe moon"

    def test_triple_space_leaves_one(self):
        assert normalize_comment("to   the moon") == "to the moon"

    def test_collapse_whitespace_option(self):
        config = AnalysisConfig(collapse_whitespace=True)
        assert normalize_comment("  to  the\tmoon  ", config) == "to themoon"

    def test_strict_encoding_raises_with_index(self):
        config = AnalysisConfig(encoding_errors="strict")
        # U+0101 encodes to C4 81; 0x81 is undefined in windows-1252
        with pytest.raises(EncodingError, match="comment 7"):
            normalize_comment("mā", config, index=7)

    def test_replace_encoding_drops_bad_bytes(self):
        assert normalize_comment("mā ok") == "m ok"

    @pytest.mark.parametrize("seed", range(40))
    def test_output_alphabet(self, seed):
        assert ALLOWED.match(normalize_comment(random_text(seed)))

    @pytest.mark.parametrize("seed", range(40))
    def test_idempotent(self, seed):
        once = normalize_comment(random_text(seed))
        assert normalize_comment(once) == once


class TestCleanComments:

    def test_drops_empty_and_reverses(self):
        cleaned = clean_comments(["First one", "123!!", "Second one"])
        assert cleaned.tolist() == ["second one", "first one"]
        assert cleaned.index.tolist() == [0, 1]

    def test_empty_input(self):
        assert clean_comments([]).empty
