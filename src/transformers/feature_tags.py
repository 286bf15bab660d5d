"""
Feature toggles and tag merging for a selected base product.

The tag list always starts with the tier key, followed by the base's
inherent features (organic, usa_made) and whatever the user toggled on,
sorted. Merging only ever adds tags.
"""

import re
from enum import Enum
from typing import Iterable, Optional, Union

from config.settings import CatalogConfig
from src.transformers.catalog_transformer import BaseProduct


class Feature(str, Enum):
    """Feature identifiers a user can toggle."""

    ORGANIC = "organic"
    USA_MADE = "usa_made"
    TRIBLEND = "triblend"


FEATURE_LABELS = {
    Feature.ORGANIC: "Organic",
    Feature.USA_MADE: "Made in USA",
    Feature.TRIBLEND: "Triblend",
}

# Free-text heuristic; see DESIGN.md for why this should become a real column
TRIBLEND_PATTERN = re.compile(r"tri-?blend", re.IGNORECASE)
TRIBLEND_TIER = "triblend"

FeatureLike = Union[Feature, str]


def feature_key(feature: FeatureLike) -> str:
    """String identifier for a Feature or raw feature name."""
    if isinstance(feature, Feature):
        return feature.value
    return str(feature).strip()


def tier_label(tier: str, labels: Optional[dict] = None) -> str:
    """Display label for a tier key; unknown keys pass through unchanged."""
    if labels is None:
        labels = CatalogConfig().tier_labels
    return labels.get(tier, tier)


def is_triblend(base: BaseProduct) -> bool:
    """Label or fit notes mention a triblend, or the tier key says so."""
    if base.tier.strip().lower() == TRIBLEND_TIER:
        return True
    return bool(TRIBLEND_PATTERN.search(base.label) or TRIBLEND_PATTERN.search(base.fit_notes))


def supports_feature(base: BaseProduct, feature: FeatureLike) -> bool:
    """Whether this base exposes the feature."""
    key = feature_key(feature)
    if key == Feature.ORGANIC.value:
        return base.organic
    if key == Feature.USA_MADE.value:
        return base.usa_made
    if key == Feature.TRIBLEND.value:
        return is_triblend(base)
    return False


def inherent_features(base: BaseProduct) -> set[str]:
    """Features a base always carries, independent of toggles."""
    features = set()
    if base.organic:
        features.add(Feature.ORGANIC.value)
    if base.usa_made:
        features.add(Feature.USA_MADE.value)
    return features


def available_features(bases: Iterable[BaseProduct]) -> set[str]:
    """
    Features that can be toggled for a category.

    A feature is available when at least one base in the group exposes it;
    anything else should be shown disabled.
    """
    bases = list(bases)
    return {
        feature.value
        for feature in Feature
        if any(supports_feature(base, feature) for base in bases)
    }


def effective_toggles(base: BaseProduct, toggles: Iterable[FeatureLike]) -> set[str]:
    """User toggles plus the base's inherent features (which cannot be switched off)."""
    keys = {feature_key(t) for t in toggles}
    keys.discard("")
    return keys | inherent_features(base)


def merge_tags(base: BaseProduct, toggles: Iterable[FeatureLike] = ()) -> list[str]:
    """
    Final tag list for a base product.

    Args:
        base: Resolved base product
        toggles: Feature identifiers the user switched on

    Returns:
        Tier key first (omitted when the tier is blank), then the sorted
        union of inherent features and toggles, without duplicates
    """
    tags: list[str] = []
    tier = base.tier.strip()
    if tier:
        tags.append(tier)
    for key in sorted(effective_toggles(base, toggles)):
        if key not in tags:
            tags.append(key)
    return tags
