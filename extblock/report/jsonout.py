"""JSON rendering helpers."""

from __future__ import annotations

import json

from extblock.models import BlocklistState, SelectionMap


def render_blocklist_json(state: BlocklistState) -> str:
    """Render a deterministic JSON blocklist payload."""
    payload = state.model_dump(mode="json")
    return json.dumps(payload, indent=2, sort_keys=True)


def render_selection_json(selection: SelectionMap) -> str:
    """Render a selection map as sorted JSON."""
    return json.dumps(selection, indent=2, sort_keys=True)
