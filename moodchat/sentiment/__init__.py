"""Sentiment scoring and mood labelling for chat messages."""

from moodchat.sentiment.classifier import LexiconSentimentClassifier, SentimentClassifier
from moodchat.sentiment.mood import Mood, mood_for_score

__all__ = [
    "LexiconSentimentClassifier",
    "SentimentClassifier",
    "Mood",
    "mood_for_score",
]
