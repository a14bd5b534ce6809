"""
Content Provider - Builds the term pool for a game.

Collects the terms of the selected categories, shuffles them with the
game seed and keeps the requested word count. Pool terms are fresh
copies: completion flags never leak back into the categories.
"""

from __future__ import annotations
import logging
import random

from ..engine_core.settings import Category, GameSettings
from ..engine_core.term import Term
from .categories import default_categories


logger = logging.getLogger("timesup.content")


def select_categories(
    category_ids: list[str],
    categories: list[Category] | None = None,
) -> list[Category]:
    """
    Pick categories by id, keeping the requested order.

    Raises ValueError for unknown ids.
    """
    available = {c.category_id: c for c in (categories or default_categories())}
    unknown = [cid for cid in category_ids if cid not in available]
    if unknown:
        raise ValueError(
            f"Unknown categories: {', '.join(unknown)} "
            f"(available: {', '.join(sorted(available))})"
        )
    return [available[cid] for cid in category_ids]


def build_term_pool(
    categories: list[Category],
    word_count: int,
    seed: int = 0,
) -> list[Term]:
    """
    Build a shuffled pool of at most word_count terms.

    Deterministic for a given seed. Duplicate texts across categories are
    kept once.
    """
    rng = random.Random(f"{seed}:pool")
    texts_seen = set()
    candidates = []
    for category in categories:
        for term in category.terms:
            key = term.text.lower()
            if key in texts_seen:
                continue
            texts_seen.add(key)
            candidates.append(term)

    rng.shuffle(candidates)
    pool = [term.copy_as_new() for term in candidates[:max(0, word_count)]]
    rng.shuffle(pool)
    logger.debug(
        "term pool built",
        extra={"requested": word_count, "available": len(candidates), "pool_size": len(pool)},
    )
    return pool


def build_pool_for_settings(settings: GameSettings) -> list[Term]:
    return build_term_pool(settings.selected_categories, settings.word_count, settings.random_seed)
