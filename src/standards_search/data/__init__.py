"""Data-access layer: repository and corpus loading."""

from .repository import StandardsRepository, section_sort_key
from .loader import CorpusLoader, load_corpus, SEED_CORPUS_DIR

__all__ = ["StandardsRepository", "section_sort_key", "CorpusLoader", "load_corpus", "SEED_CORPUS_DIR"]
