"""Sentence segmentation using spaCy's rule-based sentencizer."""

import spacy

# Lazy load the pipeline; a blank English model with the sentencizer
# needs no downloaded model package.
_nlp: spacy.Language | None = None


def get_nlp() -> spacy.Language:
    global _nlp
    if _nlp is None:
        _nlp = spacy.blank("en")
        _nlp.add_pipe("sentencizer")
    return _nlp


def split_sentences(text: str | None) -> list[str]:
    """Split text into trimmed, non-empty sentences."""
    if not text or not text.strip():
        return []
    doc = get_nlp()(text)
    return [sent.text.strip() for sent in doc.sents if sent.text.strip()]
