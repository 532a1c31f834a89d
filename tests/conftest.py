"""
Shared fixtures: a tiny on-disk comment export and stub lexicons so the
pipeline can be exercised without the real VADER / AFINN / NRC data.
"""

import matplotlib
matplotlib.use("Agg")

import nltk
import pandas as pd
import pytest

from reddit_sentiment_analysis import AnalysisConfig, Capabilities
from sentiment_trend import get_tokens

# 2022-06-30 12:00:00 UTC
NOON_JUNE_30 = 1656590400
NOON_JUNE_29 = NOON_JUNE_30 - 86400

STUB_LEXICON = {
    "love": 1, "good": 1, "great": 1, "happy": 1, "moon": 1,
    "hate": -1, "bad": -1, "crashed": -1, "scared": -1, "angry": -1,
}

STUB_EMOTIONS = {
    "love": ["joy", "positive"],
    "great": ["joy", "trust", "positive"],
    "happy": ["joy", "anticipation", "positive"],
    "crashed": ["fear", "sadness", "negative"],
    "scared": ["fear", "negative"],
    "angry": ["anger", "disgust", "negative"],
    "hate": ["anger", "negative"],
}


def stub_score(text: str) -> float:
    return float(sum(STUB_LEXICON.get(tok, 0) for tok in get_tokens(text)))


def stub_classify(text: str) -> dict:
    counts = {}
    for tok in get_tokens(text):
        for label in STUB_EMOTIONS.get(tok, []):
            counts[label] = counts.get(label, 0) + 1
    return counts


def stub_splitter(text: str) -> list:
    return [text]


@pytest.fixture
def stub_capabilities():
    return Capabilities(
        scorers={"vader": stub_score, "afinn": lambda t: 2 * stub_score(t),
                 "textblob": lambda t: stub_score(t) / 10},
        classifier=stub_classify,
        entropy_scorer=stub_score,
        sentence_splitter=stub_splitter,
    )


def write_export(path, rows):
    """rows: (created_utc, body, score) tuples."""
    pd.DataFrame(rows, columns=["created_utc", "body", "score"]).to_csv(path, index=False)
    return str(path)


@pytest.fixture
def scenario_csv(tmp_path):
    return write_export(tmp_path / "comments.csv", [
        (NOON_JUNE_30, "I love bitcoin!!", 12),
        (NOON_JUNE_30 + 60, "[deleted]", 1),
        (NOON_JUNE_30 + 120, "bitcoin CRASHED, I'm scared and angry", -3),
        (NOON_JUNE_30 + 180, "", 0),
    ])


@pytest.fixture
def scenario_config(scenario_csv, tmp_path):
    return AnalysisConfig(input_path=scenario_csv,
                          output_path=str(tmp_path / "report.pdf"))


@pytest.fixture(scope="session")
def nltk_tokenizers():
    """Make sure punkt is available for NRCLex; skip when it cannot be fetched."""
    for package in ("punkt", "punkt_tab"):
        try:
            nltk.download(package, quiet=True)
        except Exception:
            pass
    try:
        nltk.tokenize.sent_tokenize("Tokenizer check. Second sentence.")
    except LookupError:
        pytest.skip("NLTK punkt tokenizer data unavailable")
