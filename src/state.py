"""
Selection state for the configurator.

State is a frozen value; every transition returns a new SelectionState.
Nothing here touches I/O, so the CLI, the web viewer and tests share it.
"""

from dataclasses import dataclass, replace
from typing import Optional

from config.settings import CatalogConfig
from src.catalog import CatalogSnapshot
from src.transformers.catalog_transformer import BaseProduct
from src.transformers.copy_block import render_copy_block, resolve_description
from src.transformers.feature_tags import (
    Feature,
    FeatureLike,
    available_features,
    feature_key,
    inherent_features,
    merge_tags,
)


@dataclass(frozen=True)
class SelectionState:
    """Selected category, base, feature toggles and free-text filter."""

    category: Optional[str] = None
    base_code: Optional[str] = None
    features: frozenset = frozenset()
    query: str = ""


def initial_state(snapshot: CatalogSnapshot) -> SelectionState:
    """First active category and its first base, nothing toggled."""
    categories = snapshot.categories()
    if not categories:
        return SelectionState()
    return select_category(SelectionState(), snapshot, categories[0])


def select_category(state: SelectionState, snapshot: CatalogSnapshot, category: str) -> SelectionState:
    """
    Switch category.

    The base resets to the first base in the new category and toggles that
    the new category cannot offer are dropped. Unknown categories are ignored.
    """
    if category not in snapshot.categories():
        return state
    bases = snapshot.bases_for_category(category)
    allowed = available_features(bases)
    return replace(
        state,
        category=category,
        base_code=bases[0].code if bases else None,
        features=frozenset(f for f in state.features if f in allowed),
    )


def select_base(state: SelectionState, snapshot: CatalogSnapshot, code: str) -> SelectionState:
    """Select a base within the current category; other codes are ignored."""
    if not any(b.code == code for b in snapshot.bases_for_category(state.category)):
        return state
    return replace(state, base_code=code)


def toggle_feature(state: SelectionState, snapshot: CatalogSnapshot, feature: FeatureLike) -> SelectionState:
    """
    Flip a feature toggle.

    Unavailable features (no base in the category has them) cannot be
    switched on. A toggle is recorded even when the selected base already
    has the feature, so it survives moving to a base without it; switching
    it off never removes an inherent tag.
    """
    key = feature_key(feature)
    if key in state.features:
        return replace(state, features=state.features - {key})

    if key not in available_features(snapshot.bases_for_category(state.category)):
        return state
    return replace(state, features=state.features | {key})


def set_query(state: SelectionState, query: str) -> SelectionState:
    return replace(state, query=query or "")


def selected_base(state: SelectionState, snapshot: CatalogSnapshot) -> Optional[BaseProduct]:
    if state.base_code is None:
        return None
    base = snapshot.get_base(state.base_code)
    if base is None or not base.active:
        return None
    return base


def filtered_bases(state: SelectionState, snapshot: CatalogSnapshot) -> list[BaseProduct]:
    """Bases of the current category matching the free-text query."""
    bases = snapshot.bases_for_category(state.category)
    needle = state.query.strip().lower()
    if not needle:
        return bases
    return [
        b
        for b in bases
        if needle in f"{b.label} {b.brand} {b.model_name} {b.code}".lower()
    ]


def feature_options(state: SelectionState, snapshot: CatalogSnapshot) -> dict[str, dict]:
    """
    Toggle states for the UI.

    Returns:
        feature -> {"available": bool, "on": bool, "locked": bool}
        where locked means the selected base has the feature inherently
    """
    allowed = available_features(snapshot.bases_for_category(state.category))
    base = selected_base(state, snapshot)
    inherent = inherent_features(base) if base else set()
    return {
        f.value: {
            "available": f.value in allowed,
            "on": f.value in state.features or f.value in inherent,
            "locked": f.value in inherent,
        }
        for f in Feature
    }


def current_tags(state: SelectionState, snapshot: CatalogSnapshot) -> list[str]:
    base = selected_base(state, snapshot)
    if base is None:
        return []
    return merge_tags(base, state.features)


def copy_text(
    state: SelectionState,
    snapshot: CatalogSnapshot,
    catalog_config: Optional[CatalogConfig] = None,
) -> str:
    """Copy block for the current selection ("" when nothing is selected)."""
    catalog_config = catalog_config or CatalogConfig()
    base = selected_base(state, snapshot)
    if base is None:
        return ""
    description = resolve_description(base, snapshot.descriptions, catalog_config)
    return render_copy_block(
        base,
        merge_tags(base, state.features),
        description,
        tier_labels=catalog_config.tier_labels,
    )
