"""
============================================================
  Sentiment Trend Helpers — DCT Smoothing & Mixed Messages
============================================================
  Numeric building blocks shared by the Reddit comment analysis:
    - Low-pass discrete cosine transform for smooth trend lines
      (better at the edges than a Fourier low-pass)
    - Sentence splitting + token-level "emotional entropy" to flag
      sentences that mix positive and negative language
    - Rolling mean used by the entropy chart

  Nothing in here knows about Reddit or CSV files; every function
  takes plain sequences / callables so any lexicon can be plugged in.
============================================================
"""

import math
import re
from collections import Counter

import numpy as np
import pandas as pd
from scipy import fft

# ============================================================
# 1.  DEFAULTS
# ============================================================
LOW_PASS_SIZE = 5       # number of DCT coefficients kept
OUTPUT_LENGTH = 100     # points in the reconstructed curve
ROLLING_FRACTION = 0.1  # rolling window = 10% of the series


# ============================================================
# 2.  DISCRETE COSINE TREND
# ============================================================
def rescale_range(values: np.ndarray) -> np.ndarray:
    """Linearly map values onto [-1, 1]. A flat curve maps to zeros."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return values
    lo, hi = values.min(), values.max()
    if hi - lo == 0:
        return np.zeros_like(values)
    return 2 * (values - lo) / (hi - lo) - 1


def get_dct_transform(values, low_pass_size: int = LOW_PASS_SIZE,
                      output_length: int = OUTPUT_LENGTH,
                      scale_vals: bool = False,
                      scale_range: bool = True) -> np.ndarray:
    """
    Smooth a sentiment series into a fixed-length trend curve.

    The series is moved into the frequency domain with a DCT-II, only the
    lowest ``low_pass_size`` coefficients are kept, and the curve is rebuilt
    from those coefficients zero-padded to ``output_length`` points. That
    makes the result a resampling of the input, so a 3-comment batch and a
    500-comment batch both come back as ``output_length`` values.

    scale_range  -> rescale the final curve to [-1, 1]
    scale_vals   -> z-score the final curve instead

    Missing values (comments a scorer failed on) count as neutral.
    Empty input gives a flat zero curve.
    """
    if scale_vals and scale_range:
        raise ValueError("scale_vals and scale_range cannot both be True")
    if low_pass_size < 1:
        raise ValueError("low_pass_size must be at least 1")
    if output_length < 1:
        raise ValueError("output_length must be at least 1")

    raw = np.nan_to_num(np.asarray(values, dtype=float), nan=0.0)
    if raw.size == 0:
        return np.zeros(output_length)

    coefficients = fft.dct(raw, type=2)
    keep = min(low_pass_size, raw.size, output_length)
    padded = np.zeros(output_length)
    padded[:keep] = coefficients[:keep]
    curve = fft.idct(padded, type=2)

    if scale_range:
        return rescale_range(curve)
    if scale_vals:
        std = curve.std()
        return (curve - curve.mean()) / std if std > 0 else np.zeros_like(curve)
    return curve


def dct_frame(df: pd.DataFrame, low_pass_size: int = LOW_PASS_SIZE,
              output_length: int = OUTPUT_LENGTH) -> pd.DataFrame:
    """Apply get_dct_transform to every column. Index = narrative time 1..N."""
    smoothed = {
        col: get_dct_transform(df[col].astype(float).to_numpy(),
                               low_pass_size=low_pass_size,
                               output_length=output_length)
        for col in df.columns
    }
    out = pd.DataFrame(smoothed, columns=list(df.columns))
    out.index = np.arange(1, output_length + 1)
    return out


def rolling_mean(values, fraction: float = ROLLING_FRACTION) -> np.ndarray:
    """Centred rolling mean with a window of ``fraction`` of the series."""
    values = pd.Series(values, dtype=float)
    if values.empty:
        return values.to_numpy()
    window = max(1, int(round(len(values) * fraction)))
    return values.rolling(window, center=True, min_periods=1).mean().to_numpy()


# ============================================================
# 3.  SENTENCES & TOKENS
# ============================================================
def default_sentence_splitter(text: str) -> list:
    # punkt data is fetched lazily; see ensure_nltk_data() in the main script
    from nltk.tokenize import sent_tokenize
    return sent_tokenize(text)


def get_sentences(texts, splitter=None):
    """Yield every non-empty sentence of every text, in order."""
    splitter = splitter or default_sentence_splitter
    for text in texts:
        for sentence in splitter(text):
            sentence = sentence.strip()
            if sentence:
                yield sentence


def get_tokens(sentence: str) -> list:
    """Lowercase word tokens; anything but letters and apostrophes splits."""
    return [t for t in re.split(r"[^a-z']", sentence.lower()) if t]


# ============================================================
# 4.  MIXED MESSAGES  (emotional entropy)
# ============================================================
def sign_entropy(signs) -> float:
    """Shannon entropy (bits) of a sequence of -1 / 0 / +1 values."""
    signs = list(signs)
    if not signs:
        return 0.0
    total = len(signs)
    entropy = 0.0
    for n in Counter(signs).values():
        p = n / total
        entropy -= p * math.log2(p)
    return entropy


def mixed_messages(sentence: str, scorer, remove_neutral: bool = True) -> dict:
    """
    Score how contradictory a sentence is.

    Every token is scored on its own and reduced to its sign. With neutral
    tokens removed, a sentence whose sentiment words all point the same way
    has entropy 0; an even split of positive and negative words has the
    maximum of 1 bit. ``metric_entropy`` divides by the token count so long
    rambling sentences do not dominate.
    """
    tokens = get_tokens(sentence)
    signs = [int(np.sign(scorer(tok))) for tok in tokens]
    if remove_neutral:
        signs = [s for s in signs if s != 0]
    entropy = sign_entropy(signs)
    metric = entropy / len(tokens) if tokens else 0.0
    return {"entropy": entropy, "metric_entropy": metric}


def sentence_entropies(comments, scorer, splitter=None, on_error=None) -> pd.DataFrame:
    """
    One row per sentence across the batch: sentence, entropy, metric_entropy.

    If ``on_error`` is given, a scorer failure on a sentence is handed to
    ``on_error(position, exc)`` and that sentence gets NaN entropy.
    Without it the exception propagates.
    """
    rows = []
    for pos, sentence in enumerate(get_sentences(comments, splitter)):
        try:
            scored = mixed_messages(sentence, scorer)
        except Exception as exc:
            if on_error is None:
                raise
            on_error(pos, exc)
            scored = {"entropy": np.nan, "metric_entropy": np.nan}
        rows.append({"sentence": sentence, **scored})
    return pd.DataFrame(rows, columns=["sentence", "entropy", "metric_entropy"])
