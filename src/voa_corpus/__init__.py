"""Build a local research corpus of Voice of America news articles."""

from voa_corpus.corpus import Corpus
from voa_corpus.models import Document

__all__ = ["Corpus", "Document"]
