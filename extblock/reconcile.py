"""Selection map derivation from the fixed-extension collections."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from extblock.models import FixedExtension, SelectionMap

_LOG = logging.getLogger(__name__)


def reconcile(
    all_fixed: Iterable[FixedExtension],
    blocked_fixed: Iterable[FixedExtension],
) -> SelectionMap:
    """Build a fresh selection map keyed by normalized fixed-extension name.

    The key set is exactly the universe in `all_fixed`; a key maps to `True`
    iff its name appears in `blocked_fixed`. Blocked names outside the
    universe are dropped. The result shares nothing with any earlier map.
    """
    selection: SelectionMap = {extension.normalized_name: False for extension in all_fixed}

    for extension in blocked_fixed:
        name = extension.normalized_name
        if name in selection:
            selection[name] = True
        else:
            _LOG.debug("ignoring blocked fixed extension outside universe: %s", extension.name)

    return selection
