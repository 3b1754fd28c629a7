"""
Utility functions for schema validation.
"""
from typing import List, Optional

VALID_PARTS_OF_SPEECH = [
    'noun', 'verb', 'adjective', 'adverb', 'pronoun',
    'preposition', 'conjunction', 'determiner', 'interjection', 'phrase',
]

# Common abbreviations found in imported word lists
_POS_ALIASES = {
    'n': 'noun',
    'v': 'verb',
    'adj': 'adjective',
    'adv': 'adverb',
    'pron': 'pronoun',
    'prep': 'preposition',
    'conj': 'conjunction',
    'det': 'determiner',
    'article': 'determiner',
    'interj': 'interjection',
}


def normalize_part_of_speech(values: Optional[List[str]]) -> List[str]:
    """
    Normalize a list of parts of speech to lowercase canonical names.

    Blank entries and duplicates are dropped; abbreviations like 'adj' are
    expanded.

    Raises:
        ValueError: If a value is not a known part of speech
    """
    if not values:
        return []

    normalized = []
    for value in values:
        v = (value or '').strip().lower().rstrip('.')
        if not v:
            continue
        v = _POS_ALIASES.get(v, v)
        if v not in VALID_PARTS_OF_SPEECH:
            raise ValueError(
                f"part_of_speech must be one of: {', '.join(VALID_PARTS_OF_SPEECH)}. Got: {value}"
            )
        if v not in normalized:
            normalized.append(v)
    return normalized
