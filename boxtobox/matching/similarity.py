"""Label similarity and best-match selection.

similarity() is the only string-distance function in the codebase: a
normalized Levenshtein score in [0, 1], case-insensitive and deterministic.
"""

from typing import Optional, Sequence, TypeVar

from rapidfuzz.distance import Levenshtein

T = TypeVar("T")


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Normalized edit-distance similarity, 1.0 for identical (case-insensitive) strings."""
    a = (a or "").strip().lower()
    b = (b or "").strip().lower()
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def get_best_match(label: str, entities: Sequence[T]) -> Optional[T]:
    """
    Pick the entity whose label is most similar to the raw input label.

    A single candidate is returned unconditionally. On equal scores the
    earlier candidate wins, so resolver (popularity) order is preserved.
    """
    if not entities:
        return None
    if len(entities) == 1:
        return entities[0]

    best = entities[0]
    best_score = similarity(label, best.label)
    for entity in entities[1:]:
        score = similarity(label, entity.label)
        if score > best_score:
            best, best_score = entity, score
    return best


def rank_by_similarity(query: str, items: Sequence[T]) -> list[T]:
    """Stable sort by descending similarity of item.label to query."""
    return sorted(items, key=lambda item: similarity(query, item.label), reverse=True)
