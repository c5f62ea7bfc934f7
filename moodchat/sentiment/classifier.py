"""Sentiment Classifier.

Pluggable scorer interface plus an AFINN-backed default: each word
carries an integer valence in [-5, 5] from the AFINN lexicon and the
message score is the sum over its tokens, with a preceding negator
flipping the sign.
"""

import logging
import re
from typing import Dict, Optional, Protocol, runtime_checkable

from afinn import Afinn

logger = logging.getLogger(__name__)


@runtime_checkable
class SentimentClassifier(Protocol):
    """Anything that maps text to a numeric sentiment score."""

    def score(self, text: str) -> float:
        ...


_TOKEN_PATTERN = re.compile(r"[a-z']+")

_NEGATORS = {
    "not", "no", "never", "cannot", "dont", "don't", "doesn't", "didn't",
    "isn't", "wasn't", "aren't", "won't", "can't", "couldn't", "shouldn't",
}


class LexiconSentimentClassifier:
    """AFINN lexicon scorer with single-token negation.

    Example::

        classifier = LexiconSentimentClassifier()
        classifier.score("I love this!")   # 3.0
        classifier.score("not good")       # -3.0
        classifier.score("this sucks")     # -3.0

    Args:
        overrides: Extra word valences that take precedence over AFINN.
        language: AFINN word list to load.
    """

    def __init__(self, overrides: Optional[Dict[str, int]] = None, language: str = "en"):
        self._afinn = Afinn(language=language)
        self._overrides: Dict[str, float] = {word: float(v) for word, v in (overrides or {}).items()}

    def tokenize(self, text: str) -> list[str]:
        return _TOKEN_PATTERN.findall(text.lower())

    def valence(self, token: str) -> float:
        """Valence of one token: an override if present, else AFINN."""
        if token in self._overrides:
            return self._overrides[token]
        return float(self._afinn.score(token))

    def score(self, text: str) -> float:
        total = 0.0
        previous = ""
        for token in self.tokenize(text):
            valence = self.valence(token)
            if valence and previous in _NEGATORS:
                valence = -valence
            total += valence
            previous = token
        return total
