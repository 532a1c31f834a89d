"""
============================================================
  Reddit Comment Sentiment Analysis — Lexicon Pipeline
============================================================
  One day of r/Bitcoin comments, scored three ways:
    VADER (primary)  +  AFINN  +  TextBlob (cross-checks)
  plus NRC emotion word counts and "mixed message" detection.
  Produces a multi-page PDF report:
    01. Emotion word counts
    02. Emotions in text (percentage)
    03. Overall sentiment trend (DCT)
    04. Single-emotion trend (DCT)
    05. All emotion trends (DCT)
    06. Emotional entropy (mixed messages)
    07. Sentiment trend by lexicon (DCT)

  SETUP (run once in your terminal):
      pip install -e .
      python -c "import nltk; nltk.download('punkt'); nltk.download('punkt_tab')"

  USAGE:
      python reddit_sentiment_analysis.py \\
          --input reddit-r-bitcoin-data-for-jun-2022-comments.csv \\
          --output reddit_comments_sentiment_analysis.pdf \\
          --date 2022-06-30 --export reddit_sentiment_results.xlsx
============================================================
"""

import argparse
import re
import warnings
from dataclasses import dataclass, field
from datetime import date
from functools import partial

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
import seaborn as sns
import nltk

# ── VADER
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

# ── TextBlob
from textblob import TextBlob

# ── AFINN
from afinn import Afinn

# ── NRC Emotion Lexicon
from nrclex import NRCLex

from sentiment_trend import (
    default_sentence_splitter,
    dct_frame,
    get_dct_transform,
    rolling_mean,
    sentence_entropies,
)

warnings.filterwarnings("ignore")

# ============================================================
# 1.  CONFIGURATION
# ============================================================
DATA_FILE = "reddit-r-bitcoin-data-for-jun-2022-comments.csv"
OUTPUT_FILE = "reddit_comments_sentiment_analysis.pdf"
TARGET_DATE = date(2022, 6, 30)          # last day of the June 2022 export
MAX_ROWS = 500                           # cap after the date filter
LOW_PASS_SIZE = 5
OUTPUT_LENGTH = 100
PAGE_SIZE = (9.5, 7.5)                   # inches
LEGACY_ENCODING = "windows-1252"
STYLE = "seaborn-v0_8-whitegrid"

REQUIRED_COLUMNS = ("created_utc", "body", "score")
PLACEHOLDER_BODIES = ("[deleted]", "[removed]")

EMOTIONS = ("anger", "anticipation", "disgust", "fear",
            "joy", "sadness", "surprise", "trust")
SENTIMENTS = ("positive", "negative")

SCORING_METHODS_ORDER = ("vader", "afinn", "textblob")
SINGLE_EMOTION = "sadness"

COLOURS = {
    "positive": "#2ecc71",
    "neutral": "#f39c12",
    "negative": "#e74c3c",
    "primary": "#2980b9",
    "secondary": "#8e44ad",
    "dark": "#2c3e50",
    "light": "#ecf0f1",
}

# one colour per NRC column, emotions first then positive / negative
TREND_COLOURS = ["red", "orange", "lightgreen", "darkgreen", "blue",
                 "darkblue", "violet", "gray", "purple", "black"]

METHOD_COLOURS = {
    "vader": COLOURS["primary"],
    "afinn": COLOURS["secondary"],
    "textblob": COLOURS["neutral"],
}


@dataclass
class AnalysisConfig:
    """Every knob of a run. Defaults reproduce the June 2022 r/Bitcoin report."""
    input_path: str = DATA_FILE
    output_path: str = OUTPUT_FILE
    export_path: str = None
    target_date: date = TARGET_DATE      # None keeps every day
    max_rows: int = MAX_ROWS
    low_pass_size: int = LOW_PASS_SIZE
    output_length: int = OUTPUT_LENGTH
    page_size: tuple = PAGE_SIZE
    legacy_encoding: str = LEGACY_ENCODING
    encoding_errors: str = "replace"     # "strict" raises EncodingError
    emotions: tuple = EMOTIONS
    sentiments: tuple = SENTIMENTS
    placeholder_bodies: tuple = PLACEHOLDER_BODIES
    methods: tuple = SCORING_METHODS_ORDER
    single_emotion: str = SINGLE_EMOTION
    collapse_whitespace: bool = False    # True = general whitespace collapse (behaviour change)
    fail_on_empty: bool = False

    @property
    def labels(self) -> tuple:
        return tuple(self.emotions) + tuple(self.sentiments)

    @property
    def primary_method(self) -> str:
        return self.methods[0]


DEFAULT_CONFIG = AnalysisConfig()

# ============================================================
# 2.  ERRORS
# ============================================================


class SentimentAnalysisError(Exception):
    """Base class for every error this pipeline raises on purpose."""


class DataFormatError(SentimentAnalysisError):
    """Input file is missing columns or holds values that cannot be parsed."""


class EncodingError(SentimentAnalysisError):
    """A comment could not be transcoded under the strict encoding policy."""


class EmptyInputError(SentimentAnalysisError):
    """No comment survived filtering and cleaning."""


class ScoringError(SentimentAnalysisError):
    """A scorer or classifier failed on one comment. Recorded, not raised."""

    def __init__(self, index, method: str, cause: Exception, unit: str = "comment"):
        self.index = index
        self.method = method
        self.cause = cause
        super().__init__(
            f"{method} failed on {unit} {index}: {type(cause).__name__}: {cause}")


# ============================================================
# 3.  NLTK DATA
# ============================================================
NLTK_RESOURCES = [
    ("tokenizers/punkt", "punkt"),
    ("tokenizers/punkt_tab", "punkt_tab"),  # newer NLTK releases
]


def ensure_nltk_data():
    """Fetch the sentence tokenizer models used by NRCLex and get_sentences."""
    for resource, package in NLTK_RESOURCES:
        try:
            nltk.data.find(resource)
        except LookupError:
            print(f"  ⬇ NLTK '{package}' not found. Downloading …")
            if not nltk.download(package, quiet=True):
                print(f"  ⚠ Could not download NLTK '{package}'. "
                      "Sentence splitting may fail.")

# ============================================================
# 4.  LOAD & FILTER
# ============================================================


def load_comments(filepath: str) -> pd.DataFrame:
    try:
        df = pd.read_csv(filepath, keep_default_na=False)
    except pd.errors.EmptyDataError as e:
        raise DataFormatError(f"{filepath}: file is empty") from e
    except pd.errors.ParserError as e:
        raise DataFormatError(f"{filepath}: malformed CSV: {e}") from e
    except UnicodeDecodeError as e:
        raise DataFormatError(f"{filepath}: not valid UTF-8: {e}") from e

    # ── standardise column names (strip whitespace)
    df.columns = df.columns.str.strip()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DataFormatError(
            f"{filepath}: missing required column(s): {', '.join(missing)}")

    # ── created_utc  →  UTC datetime (epoch seconds)
    epoch = pd.to_numeric(df["created_utc"], errors="coerce")
    if epoch.isna().any():
        bad = df.index[epoch.isna()].tolist()[:5]
        raise DataFormatError(
            f"{filepath}: unparsable created_utc in row(s) {bad}")

    # ── score  →  int
    score = pd.to_numeric(df["score"], errors="coerce")
    if score.isna().any() or (score % 1 != 0).any():
        bad = df.index[score.isna() | (score % 1 != 0)].tolist()[:5]
        raise DataFormatError(
            f"{filepath}: non-integer score in row(s) {bad}")

    df["created_utc"] = pd.to_datetime(epoch, unit="s", utc=True)
    df["date"] = df["created_utc"].dt.date
    df["score"] = score.astype(int)
    df["body"] = df["body"].astype(str)

    print(f"\n✔ Loaded {len(df):,} comments from {filepath}\n")
    return df


def filter_comments(df: pd.DataFrame, config: AnalysisConfig = DEFAULT_CONFIG) -> pd.Series:
    """
    Date → row cap → placeholder removal, in that order.

    The cap runs before placeholders are dropped, so ``[deleted]`` rows
    still use up slots among the first ``max_rows``.
    """
    kept = df
    if config.target_date is not None:
        kept = kept[kept["date"] == config.target_date]
    on_date = len(kept)

    kept = kept.head(config.max_rows)
    capped = len(kept)

    bodies = kept["body"]
    bodies = bodies[~bodies.isin(config.placeholder_bodies)]

    day = config.target_date.isoformat() if config.target_date else "all dates"
    print(f"✔ Filtered  |  {on_date:,} on {day}  |  {capped:,} after cap  |  "
          f"{len(bodies):,} after removing {' / '.join(config.placeholder_bodies)}\n")
    return bodies.reset_index(drop=True)

# ============================================================
# 5.  TEXT CLEANING
# ============================================================


def normalize_comment(text: str, config: AnalysisConfig = DEFAULT_CONFIG, index=None) -> str:
    """Lowercase, transcode, keep only letters / spaces / apostrophes."""
    text = str(text).lower()
    try:
        text = text.encode("utf-8").decode(config.legacy_encoding,
                                           errors=config.encoding_errors)
    except UnicodeDecodeError as e:
        where = f"comment {index}" if index is not None else "comment"
        raise EncodingError(
            f"{where}: cannot transcode as {config.legacy_encoding}: {e}") from e

    text = re.sub(r"[^A-Za-z ']", "", text)
    if config.collapse_whitespace:
        return re.sub(r"\s+", " ", text).strip()
    # single pass: a run of 3 spaces keeps one, a run of 2 joins the words
    return text.replace("  ", "")


def clean_comments(bodies, config: AnalysisConfig = DEFAULT_CONFIG) -> pd.Series:
    cleaned = pd.Series(
        [normalize_comment(b, config, index=i) for i, b in enumerate(bodies)],
        dtype=object)
    cleaned = cleaned[cleaned != ""]

    # oldest → latest, so position doubles as narrative time
    cleaned = cleaned.iloc[::-1].reset_index(drop=True)

    print(f"✔ Cleaned  |  {len(cleaned):,} non-empty comments (oldest first)\n")
    return cleaned

# ============================================================
# 6.  SENTIMENT SCORING
# ============================================================


def score_vader(text: str, analyser: SentimentIntensityAnalyzer) -> float:
    """VADER compound (−1 → +1)."""
    return analyser.polarity_scores(text)["compound"]


def score_afinn(text: str, afinn: Afinn) -> float:
    """Sum of AFINN word valences (unbounded)."""
    return afinn.score(text)


def score_textblob(text: str) -> float:
    return TextBlob(text).sentiment.polarity


SCORING_METHODS = {
    "vader": lambda: partial(score_vader, analyser=SentimentIntensityAnalyzer()),
    "afinn": lambda: partial(score_afinn, afinn=Afinn()),
    "textblob": lambda: score_textblob,
}


def build_scorers(methods=SCORING_METHODS_ORDER) -> dict:
    unknown = [m for m in methods if m not in SCORING_METHODS]
    if unknown:
        raise ValueError(f"unknown scoring method(s): {', '.join(unknown)} "
                         f"(choose from {', '.join(SCORING_METHODS)})")
    return {m: SCORING_METHODS[m]() for m in methods}


def score_comments(comments: pd.Series, scorers: dict):
    """
    Run every scorer over every comment.

    Returns (scores, failures). ``scores`` has one column per method and the
    same index as ``comments``; a comment a scorer chokes on gets NaN in that
    column and a ScoringError in ``failures``; the rest of the batch goes on.
    """
    failures = []
    columns = {}
    for method, scorer in scorers.items():
        values = []
        for idx, text in comments.items():
            try:
                values.append(float(scorer(text)))
            except Exception as exc:
                err = ScoringError(idx, method, exc)
                print(f"  ⚠ {err}")
                failures.append(err)
                values.append(np.nan)
        columns[method] = values

    scores = pd.DataFrame(columns, index=comments.index, columns=list(scorers))
    print(f"✔ Sentiment scoring complete  ({', '.join(scorers)}).\n")
    return scores, failures


def label_sentiment(score: float) -> str:
    if pd.isna(score):
        return "No Score"
    if score > 0.0:
        return "Positive"
    elif score < 0.0:
        return "Negative"
    else:
        return "Neutral"


def method_agreement(scores: pd.DataFrame) -> pd.Series:
    """True where every method points the same way (sign) for a comment."""
    return np.sign(scores).nunique(axis=1) <= 1

# ============================================================
# 7.  NRC EMOTIONS
# ============================================================


def classify_emotions(text: str, labels=EMOTIONS + SENTIMENTS) -> dict:
    """Count NRC emotion / sentiment words in one comment."""
    raw = NRCLex(text).raw_emotion_scores
    counts = {label: int(raw.get(label, 0)) for label in labels}
    # some NRCLex lexicon builds key anticipation as "anticip"
    if "anticipation" in counts:
        counts["anticipation"] += int(raw.get("anticip", 0))
    return counts


def classify_comments(comments: pd.Series, classifier, labels=EMOTIONS + SENTIMENTS):
    failures = []
    rows = []
    for idx, text in comments.items():
        try:
            counts = classifier(text)
            rows.append({label: int(counts.get(label, 0)) for label in labels})
        except Exception as exc:
            err = ScoringError(idx, "nrc", exc)
            print(f"  ⚠ {err}")
            failures.append(err)
            rows.append({label: 0 for label in labels})

    counts = pd.DataFrame(rows, index=comments.index, columns=list(labels))
    counts = counts.fillna(0).astype(int)
    print("✔ NRC emotion classification complete.\n")
    return counts, failures


def aggregate_emotions(counts: pd.DataFrame) -> pd.DataFrame:
    """Total word count per emotion / sentiment across the whole batch."""
    totals = counts.sum(axis=0).astype(int)
    return totals.rename("count").rename_axis("sentiment").reset_index()


def emotion_proportions(counts: pd.DataFrame, emotions=EMOTIONS) -> pd.Series:
    """Share of all emotion words held by each emotion, ascending."""
    sub = counts[list(emotions)].astype(float)
    total = sub.to_numpy().sum()
    if total == 0:
        return pd.Series(0.0, index=list(emotions))
    return (sub.sum(axis=0) / total).sort_values()

# ============================================================
# 8.  PIPELINE
# ============================================================


@dataclass
class Capabilities:
    """The pluggable pieces: lexicon scorers, emotion classifier, sentence tools."""
    scorers: dict
    classifier: object
    entropy_scorer: object
    sentence_splitter: object = default_sentence_splitter


def default_capabilities(config: AnalysisConfig = DEFAULT_CONFIG) -> Capabilities:
    scorers = build_scorers(config.methods)
    return Capabilities(
        scorers=scorers,
        classifier=partial(classify_emotions, labels=config.labels),
        entropy_scorer=scorers[config.primary_method],
    )


@dataclass
class AnalysisReport:
    config: AnalysisConfig
    comments: pd.Series
    scores: pd.DataFrame
    emotions: pd.DataFrame
    emotion_totals: pd.DataFrame
    entropies: pd.DataFrame
    sentiment_trends: pd.DataFrame = None
    emotion_trends: pd.DataFrame = None
    entropy_rolling: np.ndarray = None
    entropy_trend: np.ndarray = None
    stage_counts: dict = field(default_factory=dict)
    failures: list = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.comments) == 0


def build_trends(report: AnalysisReport) -> AnalysisReport:
    """DCT-smooth every numeric series the charts need."""
    cfg = report.config
    report.sentiment_trends = dct_frame(report.scores, cfg.low_pass_size, cfg.output_length)
    report.emotion_trends = dct_frame(report.emotions, cfg.low_pass_size, cfg.output_length)
    entropy = report.entropies["entropy"].to_numpy(dtype=float)
    report.entropy_rolling = rolling_mean(entropy)
    report.entropy_trend = get_dct_transform(
        entropy, low_pass_size=cfg.low_pass_size, output_length=cfg.output_length)
    return report


def run_analysis(config: AnalysisConfig = DEFAULT_CONFIG, capabilities: Capabilities = None) -> AnalysisReport:
    print("\n🔄 Loading data …")
    df = load_comments(config.input_path)

    print("🔄 Filtering comments …")
    bodies = filter_comments(df, config)

    print("🔄 Cleaning text …")
    comments = clean_comments(bodies, config)

    if comments.empty:
        if config.fail_on_empty:
            raise EmptyInputError(
                f"no comments left after filtering {config.input_path}")
        print("  ⚠ No comments survived filtering; charts will be placeholders.\n")

    capabilities = capabilities or default_capabilities(config)

    print("🔄 Running sentiment analysis …")
    scores, failures = score_comments(comments, capabilities.scorers)

    print("🔄 Classifying NRC emotions …")
    emotions, emotion_failures = classify_comments(
        comments, capabilities.classifier, config.labels)

    print("🔄 Detecting mixed messages …")
    entropy_failures = []

    def record_entropy_failure(pos, exc):
        err = ScoringError(pos, "entropy", exc, unit="sentence")
        print(f"  ⚠ {err}")
        entropy_failures.append(err)

    entropies = sentence_entropies(
        comments, capabilities.entropy_scorer, capabilities.sentence_splitter,
        on_error=record_entropy_failure)
    print(f"✔ {len(entropies):,} sentences scored for emotional entropy.\n")

    report = AnalysisReport(
        config=config,
        comments=comments,
        scores=scores,
        emotions=emotions,
        emotion_totals=aggregate_emotions(emotions),
        entropies=entropies,
        stage_counts={"loaded": len(df), "filtered": len(bodies),
                      "cleaned": len(comments)},
        failures=failures + emotion_failures + entropy_failures,
    )
    return build_trends(report)

# ============================================================
# 9.  VISUALISATIONS  (one PDF page each)
# ============================================================


def setup_plot():
    plt.style.use(STYLE)
    plt.rcParams.update({
        "font.family": "sans-serif",
        "font.size": 11,
        "axes.titlesize": 14,
        "axes.titleweight": "bold",
        "axes.labelsize": 11,
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.spines.top": False,
        "axes.spines.right": False,
    })


def save_page(fig, pdf, title: str):
    pdf.savefig(fig, facecolor="white")
    plt.close(fig)
    print(f"  📄 page added  →  {title}")


def draw_placeholder(ax, message: str = "No comments survived filtering"):
    ax.text(0.5, 0.5, message, transform=ax.transAxes, ha="center",
            va="center", fontsize=13, color="grey")
    ax.set_xticks([])
    ax.set_yticks([])


def day_label(config: AnalysisConfig) -> str:
    if config.target_date is None:
        return ""
    return f" on {config.target_date:%d %B %Y}"


def plot_trend_line(ax, curve, title: str, colour: str):
    x = np.arange(1, len(curve) + 1)
    ax.plot(x, curve, color=colour, linewidth=2.2)
    ax.axhline(0, color=COLOURS["dark"], linewidth=0.8, linestyle="--", alpha=0.5)
    ax.set_title(title, fontsize=13)
    ax.set_xlabel("Narrative Time")
    ax.set_ylabel("Emotional Valence")
    ax.set_ylim(-1.1, 1.1)


# ── 9.1  Emotion word counts  (bar)
def chart_01_emotion_counts(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()
    totals = report.emotion_totals
    td = totals[totals["sentiment"].isin(config.emotions)]

    fig, ax = plt.subplots(figsize=config.page_size)
    title = f"General Emotion Word Count of Reddit Comments{day_label(config)}"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.is_empty:
        draw_placeholder(ax)
    else:
        sns.barplot(data=td, x="sentiment", y="count", hue="sentiment",
                    palette="husl", legend=False, ax=ax)
        for i, val in enumerate(td["count"]):
            ax.text(i, val, f"{val:,}", ha="center", va="bottom",
                    fontweight="bold", fontsize=10)
        ax.set_xlabel("sentiment")
        ax.set_ylabel("count")

    plt.tight_layout()
    save_page(fig, pdf, title)


# ── 9.2  Emotions in text  (horizontal percentage bar)
def chart_02_emotion_percentages(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()
    pct = emotion_proportions(report.emotions, config.emotions) * 100

    fig, ax = plt.subplots(figsize=config.page_size)
    title = "Emotions in Text"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.is_empty:
        draw_placeholder(ax)
    else:
        colours = plt.get_cmap("terrain")(np.linspace(0.0, 0.85, len(pct)))
        ax.barh(pct.index, pct.values, color=colours, edgecolor="white", height=0.6)
        for i, val in enumerate(pct.values):
            ax.text(val + 0.3, i, f"{val:.1f}%", va="center", fontsize=9)
        ax.set_xlabel("Percentage")
        ax.tick_params(axis="y", labelsize=9)

    plt.tight_layout()
    save_page(fig, pdf, title)


# ── 9.3  Overall sentiment trend  (primary method, DCT)
def chart_03_sentiment_trend(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()
    method = config.primary_method

    fig, ax = plt.subplots(figsize=config.page_size)
    title = "Sentiment Trend of Reddit Comments using DCT Values"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.is_empty:
        draw_placeholder(ax)
    else:
        plot_trend_line(ax, report.sentiment_trends[method],
                        f"{method.upper()} scores, low-pass {config.low_pass_size}", "blue")

    plt.tight_layout()
    save_page(fig, pdf, title)


# ── 9.4  One emotion over time  (DCT)
def chart_04_emotion_trend(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()
    emotion = config.single_emotion

    fig, ax = plt.subplots(figsize=config.page_size)
    title = f"{emotion.title()} Trend of Reddit Comments"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.is_empty:
        draw_placeholder(ax)
    else:
        plot_trend_line(ax, report.emotion_trends[emotion],
                        "NRC word counts per comment", "blue")

    plt.tight_layout()
    save_page(fig, pdf, title)


# ── 9.5  Every emotion over time  (multi-line DCT)
def chart_05_all_emotion_trends(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()

    fig, ax = plt.subplots(figsize=config.page_size)
    title = "All Emotion Sentiments over Time"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.is_empty:
        draw_placeholder(ax)
    else:
        trends = report.emotion_trends[list(config.emotions)]
        for emotion, colour in zip(trends.columns, TREND_COLOURS):
            ax.plot(trends.index, trends[emotion], color=colour,
                    linewidth=2.0, label=emotion)
        ax.set_xlabel("Narrative Time")
        ax.set_ylabel("Emotional Valence")
        ax.legend(loc="upper right", fontsize=9, framealpha=0.95)

    plt.tight_layout()
    save_page(fig, pdf, title)


# ── 9.6  Emotional entropy  (raw + rolling + DCT, then simplified shape)
def chart_06_emotional_entropy(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()

    fig, (ax_top, ax_bottom) = plt.subplots(2, 1, figsize=config.page_size)
    title = "Emotional Entropy in Reddit Comments"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.entropies.empty:
        draw_placeholder(ax_top)
        draw_placeholder(ax_bottom, "No sentences to score")
    else:
        entropy = report.entropies["entropy"].to_numpy(dtype=float)
        x = np.arange(1, len(entropy) + 1)
        ax_top.plot(x, entropy, color="grey", linewidth=0.8, alpha=0.7,
                    label="Entropy per sentence")
        ax_top.plot(x, report.entropy_rolling, color=COLOURS["primary"],
                    linewidth=2.0, label="Rolling mean (10%)")
        ax_top.set_xlabel("Sentence")
        ax_top.set_ylabel("Entropy (bits)")

        # DCT curve rides its own axis, stretched over the sentence range
        ax_dct = ax_top.twinx()
        dct_x = np.linspace(1, max(len(entropy), 1), len(report.entropy_trend))
        ax_dct.plot(dct_x, report.entropy_trend, color=COLOURS["negative"],
                    linewidth=2.0, label="DCT trend")
        ax_dct.set_ylim(-1.1, 1.1)
        ax_dct.set_ylabel("Scaled")

        handles = ax_top.get_legend_handles_labels()
        dct_handles = ax_dct.get_legend_handles_labels()
        ax_top.legend(handles[0] + dct_handles[0], handles[1] + dct_handles[1],
                      loc="upper left", fontsize=9)

        plot_trend_line(ax_bottom, report.entropy_trend,
                        "Simplified Macro Shape", COLOURS["negative"])

    plt.tight_layout()
    save_page(fig, pdf, title)


# ── 9.7  Trend per lexicon  (VADER vs AFINN vs TextBlob, DCT)
def chart_07_method_trends(report: AnalysisReport, pdf, config: AnalysisConfig):
    setup_plot()

    fig, ax = plt.subplots(figsize=config.page_size)
    title = "Sentiment Trend by Lexicon (DCT Values)"
    fig.suptitle(title, fontsize=16, fontweight="bold")

    if report.is_empty:
        draw_placeholder(ax)
    else:
        for method in report.sentiment_trends.columns:
            ax.plot(report.sentiment_trends.index, report.sentiment_trends[method],
                    color=METHOD_COLOURS.get(method, COLOURS["dark"]),
                    linewidth=2.2, label=method.upper())
        ax.axhline(0, color=COLOURS["dark"], linewidth=0.8, linestyle="--", alpha=0.5)
        ax.set_xlabel("Narrative Time")
        ax.set_ylabel("Emotional Valence")
        ax.set_ylim(-1.1, 1.1)
        ax.legend(title="Method")

    plt.tight_layout()
    save_page(fig, pdf, title)


CHART_STEPS = [
    chart_01_emotion_counts,
    chart_02_emotion_percentages,
    chart_03_sentiment_trend,
    chart_04_emotion_trend,
    chart_05_all_emotion_trends,
    chart_06_emotional_entropy,
    chart_07_method_trends,
]


def render_report(report: AnalysisReport, config: AnalysisConfig = None) -> int:
    """Write every chart, in order, to one PDF. Returns the page count."""
    config = config or report.config
    with PdfPages(config.output_path) as pdf:
        try:
            for step in CHART_STEPS:
                step(report, pdf, config)
        finally:
            plt.close("all")
        pages = pdf.get_pagecount()
    print(f"\n  💾 saved  →  {config.output_path}  ({pages} pages)")
    return pages

# ============================================================
# 10.  SUMMARY REPORT  (printed + saved as Excel)
# ============================================================


def print_summary(report: AnalysisReport, top_n: int = 5):
    print("\n" + "="*60)
    print("  REDDIT SENTIMENT ANALYSIS SUMMARY")
    print("="*60)

    counts = report.stage_counts
    print(f"\n  Comments loaded          : {counts.get('loaded', 0):,}")
    print(f"  After filtering          : {counts.get('filtered', 0):,}")
    print(f"  After cleaning           : {counts.get('cleaned', 0):,}")

    if report.is_empty:
        print("\n  (nothing to score)")
        print("\n" + "="*60 + "\n")
        return

    print(f"\n  — Scores by method (first 6 comments) —")
    for method in report.scores.columns:
        col = report.scores[method]
        head = "  ".join(f"{v:+.2f}" for v in col.head(6))
        print(f"    {method:10s} mean {col.mean():+.3f}   |  {head}")

    agree = method_agreement(report.scores).mean() * 100
    print(f"\n  Method agreement (same sign) : {agree:.1f}%")

    print(f"\n  — NRC word counts —")
    for _, row in report.emotion_totals.iterrows():
        print(f"    {row['sentiment']:14s} : {row['count']:6,}")

    mixed = report.entropies.nlargest(top_n, "entropy")
    mixed = mixed[mixed["entropy"] > 0]
    print(f"\n  — Most mixed messages —")
    if mixed.empty:
        print("    (no sentence mixes positive and negative words)")
    for _, row in mixed.iterrows():
        text = row["sentence"]
        if len(text) > 70:
            text = text[:67] + "..."
        print(f"    {row['entropy']:.2f}  {text}")

    if report.failures:
        print(f"\n  — Scoring failures ({len(report.failures)}) —")
        for err in report.failures:
            print(f"    {err}")

    print("\n" + "="*60 + "\n")


def export_results(report: AnalysisReport, out_path: str):
    """Save one row per cleaned comment with every score and NRC count."""
    primary = report.config.primary_method
    results = pd.concat([
        report.comments.rename("comment"),
        report.scores,
        report.emotions,
    ], axis=1)
    results.insert(0, "narrative_time", results.index + 1)
    if primary in report.scores.columns:
        results["Sentiment_Label"] = report.scores[primary].apply(label_sentiment)
    results["Agreement"] = method_agreement(report.scores)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        results.to_excel(writer, sheet_name="comments", index=False)
        report.entropies.to_excel(writer, sheet_name="mixed_messages", index=False)
        report.emotion_totals.to_excel(writer, sheet_name="emotion_totals", index=False)
    print(f"  💾 enriched results saved → {out_path}\n")

# ============================================================
# 11.  MAIN
# ============================================================


def parse_date(value: str):
    if value.lower() == "all":
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"expected YYYY-MM-DD or 'all', got {value!r}") from e


def parse_args(argv=None) -> AnalysisConfig:
    ap = argparse.ArgumentParser(
        description="Lexicon sentiment + NRC emotion report for a Reddit comment export.")
    ap.add_argument("--input", default=DATA_FILE, help="CSV with created_utc, body, score")
    ap.add_argument("--output", default=OUTPUT_FILE, help="PDF report to write")
    ap.add_argument("--export", default=None, help="Optional .xlsx with per-comment results")
    ap.add_argument("--date", type=parse_date, default=TARGET_DATE,
                    help="Day to analyse (YYYY-MM-DD, UTC) or 'all'")
    ap.add_argument("--max-rows", type=int, default=MAX_ROWS)
    ap.add_argument("--low-pass-size", type=int, default=LOW_PASS_SIZE)
    ap.add_argument("--output-length", type=int, default=OUTPUT_LENGTH)
    ap.add_argument("--single-emotion", choices=EMOTIONS + SENTIMENTS, default=SINGLE_EMOTION)
    ap.add_argument("--strict-encoding", action="store_true",
                    help="Fail on text that cannot be transcoded instead of replacing it")
    ap.add_argument("--collapse-whitespace", action="store_true",
                    help="Collapse every whitespace run (changes the default cleaning)")
    ap.add_argument("--fail-on-empty", action="store_true",
                    help="Abort when no comment survives filtering")
    args = ap.parse_args(argv)

    return AnalysisConfig(
        input_path=args.input,
        output_path=args.output,
        export_path=args.export,
        target_date=args.date,
        max_rows=args.max_rows,
        low_pass_size=args.low_pass_size,
        output_length=args.output_length,
        single_emotion=args.single_emotion,
        encoding_errors="strict" if args.strict_encoding else "replace",
        collapse_whitespace=args.collapse_whitespace,
        fail_on_empty=args.fail_on_empty,
    )


def main(argv=None):
    config = parse_args(argv)
    ensure_nltk_data()

    try:
        report = run_analysis(config)

        print("🔄 Generating report …\n")
        render_report(report, config)

        print("\n🔄 Summary …")
        print_summary(report)

        if config.export_path:
            print("🔄 Exporting enriched data …")
            export_results(report, config.export_path)
    except (SentimentAnalysisError, FileNotFoundError) as e:
        print(f"\n❌ {e}\n")
        raise SystemExit(1)

    print(f"✅ All done! Report saved as  ./{config.output_path}  \n")


if __name__ == "__main__":
    main()
