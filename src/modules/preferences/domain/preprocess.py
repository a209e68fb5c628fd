"""Normalization of a recovered or pulled configuration record."""

from src.modules.preferences.domain.entities import ConfigurationRecord
from src.modules.sources.domain.catalog import FAVORITES_CATEGORY, SourceCatalog


def _normalize_category(
    category: str, stored: list[str], catalog: SourceCatalog
) -> list[str]:
    kept: list[str] = []
    seen: set[str] = set()
    for raw_id in stored:
        canonical = catalog.resolve(raw_id)
        if canonical is None or canonical in seen:
            continue
        if not catalog.belongs_to(canonical, category):
            continue
        seen.add(canonical)
        kept.append(canonical)

    if category != FAVORITES_CATEGORY:
        kept.extend(s for s in catalog.default_sources(category) if s not in seen)
    return kept


def default_category_sources(catalog: SourceCatalog) -> dict[str, list[str]]:
    return {
        category: catalog.default_sources(category)
        for category in catalog.fixed_categories()
    }


def preprocess(record: ConfigurationRecord, catalog: SourceCatalog) -> ConfigurationRecord:
    """Give ``record`` a complete, valid shape against ``catalog``.

    For every fixed category: redirects are rewritten to canonical ids, unknown
    or out-of-category ids are dropped, duplicates removed in stored order, and
    catalog defaults missing from the list are appended. Categories outside the
    fixed set are discarded. Pinned categories, views, write time and action are
    preserved. Idempotent.
    """
    data = {
        category: _normalize_category(category, record.data.get(category, []), catalog)
        for category in catalog.fixed_categories()
    }
    return record.model_copy(update={"data": data})
