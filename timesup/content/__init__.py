"""
Content - Categories and term pool construction.
"""

from .categories import default_categories, make_category, DEFAULT_CATEGORY_DATA
from .provider import select_categories, build_term_pool, build_pool_for_settings

__all__ = [
    "default_categories",
    "make_category",
    "DEFAULT_CATEGORY_DATA",
    "select_categories",
    "build_term_pool",
    "build_pool_for_settings",
]
