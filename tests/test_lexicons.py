"""
Integration checks against the real lexicon libraries.
"""

import pandas as pd
import pytest

from reddit_sentiment_analysis import (
    EMOTIONS,
    SENTIMENTS,
    aggregate_emotions,
    build_scorers,
    classify_comments,
    classify_emotions,
    clean_comments,
)


@pytest.fixture(scope="module")
def scorers():
    return build_scorers(("vader", "afinn", "textblob"))


class TestScorers:

    @pytest.mark.parametrize("method", ["vader", "afinn", "textblob"])
    def test_positive_text(self, scorers, method):
        assert scorers[method]("i love this wonderful day") > 0

    @pytest.mark.parametrize("method", ["vader", "afinn", "textblob"])
    def test_negative_text(self, scorers, method):
        assert scorers[method]("this is terrible and i hate it") < 0


@pytest.mark.usefixtures("nltk_tokenizers")
class TestNrcEmotions:

    def test_counts_cover_all_labels(self):
        counts = classify_emotions("i love this wonderful day")
        assert set(counts) == set(EMOTIONS + SENTIMENTS)
        assert counts["joy"] > 0
        assert counts["positive"] > 0

    def test_all_positive_batch_has_no_anger_or_sadness(self):
        comments = clean_comments([
            "I love this wonderful happy gift!",
            "What a beautiful smile",
            "Love it",
        ])
        counts, failures = classify_comments(comments, classify_emotions)
        totals = aggregate_emotions(counts).set_index("sentiment")["count"]

        assert failures == []
        assert totals["anger"] == 0
        assert totals["sadness"] == 0
        assert totals["positive"] > 0
