"""Comparison, insight and process generation built on the search engine."""

from .topics import Topic, COMPARISON_TOPICS, COMMON_TOPICS, get_topic
from .comparison import ComparisonAnalyzer
from .process import ProcessGenerator

__all__ = ["Topic", "COMPARISON_TOPICS", "COMMON_TOPICS", "get_topic", "ComparisonAnalyzer", "ProcessGenerator"]
