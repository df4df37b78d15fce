"""Blocklist session state and mutation coordination."""

from __future__ import annotations

import logging
from typing import Protocol

from extblock.catalog import CatalogSource, load_catalog
from extblock.errors import ExtensionBoundsError, StructuredServerError, TransportError
from extblock.models import (
    MAX_CUSTOM,
    MAX_NAME_LENGTH,
    BlocklistState,
    CustomExtension,
    FixedExtension,
    FixedExtensionState,
    SelectionMap,
    normalize_extension_name,
)
from extblock.reconcile import reconcile
from extblock.store.mirror import SelectionMirror

BOUNDS_ERROR_MESSAGE = (
    f"Extension names are limited to {MAX_NAME_LENGTH} characters and at most "
    f"{MAX_CUSTOM} custom extensions can be blocked."
)
ADD_FAILED_MESSAGE = "An error occurred while adding the extension."
REMOVE_FAILED_MESSAGE = "An error occurred while removing the extension."

_LOG = logging.getLogger(__name__)


class BlocklistClient(CatalogSource, Protocol):
    def add_custom(self, name: str) -> None: ...

    def remove_custom(self, extension_id: int | str) -> None: ...


def check_add_bounds(name: str, custom_count: int) -> None:
    """Raise `ExtensionBoundsError` when a new custom extension would exceed limits."""
    if len(name) > MAX_NAME_LENGTH or custom_count >= MAX_CUSTOM:
        raise ExtensionBoundsError(BOUNDS_ERROR_MESSAGE)


class BlocklistSession:
    """Local view of the remote blocklist plus the operations that mutate it.

    Lists and the selection map are replaced wholesale by every successful
    `refresh`. Mutations never patch the lists directly: they call the store
    and then reload. `toggle_fixed` is the one place that patches `selection`
    ahead of the server.
    """

    def __init__(
        self,
        client: BlocklistClient,
        *,
        mirror: SelectionMirror | None = None,
        rollback_failed_toggle: bool = True,
    ) -> None:
        self.client = client
        self.mirror = mirror
        self.rollback_failed_toggle = rollback_failed_toggle
        self.custom_extensions: list[CustomExtension] = []
        self.fixed_all: list[FixedExtension] = []
        self.fixed_blocked: list[FixedExtension] = []
        self.selection: SelectionMap = {}
        self.pending_input = ""
        self.error_message = ""
        self.last_load_error: str | None = None

    def refresh(self) -> bool:
        """Reload both collections and re-derive the selection map.

        On failure the previous state is kept untouched and the error is only
        logged; `error_message` is reserved for write-path failures.
        """
        try:
            catalog = load_catalog(self.client)
        except TransportError as exc:
            _LOG.warning("error fetching extensions: %s", exc)
            self.last_load_error = str(exc)
            return False

        selection = reconcile(catalog.fixed_all, catalog.fixed_blocked)
        self.custom_extensions = catalog.custom_extensions
        self.fixed_all = catalog.fixed_all
        self.fixed_blocked = catalog.fixed_blocked
        self.selection = selection
        self.last_load_error = None
        if self.mirror is not None:
            self.mirror.write(selection)
        return True

    def add_extension(self, name: str) -> bool:
        """Create a custom extension named `name`, then reload."""
        try:
            check_add_bounds(name, len(self.custom_extensions))
        except ExtensionBoundsError as exc:
            self.error_message = str(exc)
            return False

        try:
            self.client.add_custom(name)
        except TransportError as exc:
            _LOG.error("error adding custom extension %r: %s", name, exc)
            self.error_message = _user_message(exc, ADD_FAILED_MESSAGE)
            return False

        self.refresh()
        self.pending_input = ""
        self.error_message = ""
        return True

    def submit_pending(self) -> bool:
        return self.add_extension(self.pending_input)

    def remove_extension(self, record: CustomExtension | FixedExtension) -> bool:
        """Delete the custom record identified by `record.id`, then reload."""
        try:
            self.client.remove_custom(record.id)
        except TransportError as exc:
            _LOG.error("error removing custom extension %s: %s", record.id, exc)
            self.error_message = _user_message(exc, REMOVE_FAILED_MESSAGE)
            return False

        self.refresh()
        self.error_message = ""
        return True

    def toggle_fixed(self, name: str) -> bool:
        """Flip a fixed extension's blocked flag and push the change to the store.

        The flip is applied to `selection` before any request. Blocking goes
        through `add_extension` with the normalized name; unblocking removes
        the universe record sharing that name, and is a no-op past the flip
        when no such record exists.
        """
        key = normalize_extension_name(name)
        had_entry = key in self.selection
        previous = self.selection.get(key, False)
        blocked = not previous
        self.selection = {**self.selection, key: blocked}

        if blocked:
            succeeded = self.add_extension(key)
        else:
            record = self.find_fixed(key)
            if record is None:
                return True
            succeeded = self.remove_extension(record)

        if not succeeded and self.rollback_failed_toggle:
            self._rollback_toggle(key, had_entry=had_entry, previous=previous, flipped=blocked)
        return succeeded

    def find_fixed(self, name: str) -> FixedExtension | None:
        key = normalize_extension_name(name)
        return next((item for item in self.fixed_all if item.normalized_name == key), None)

    def find_custom(self, name_or_id: str) -> CustomExtension | None:
        by_id = next((item for item in self.custom_extensions if str(item.id) == name_or_id), None)
        if by_id is not None:
            return by_id
        key = normalize_extension_name(name_or_id)
        return next((item for item in self.custom_extensions if item.normalized_name == key), None)

    def custom_count_label(self) -> str:
        return f"{len(self.custom_extensions)}/{MAX_CUSTOM}"

    def snapshot(self) -> BlocklistState:
        fixed = [
            FixedExtensionState(
                id=item.id,
                name=item.name,
                blocked=self.selection.get(item.normalized_name, False),
            )
            for item in self.fixed_all
        ]
        return BlocklistState(
            fixed=fixed,
            selection=dict(self.selection),
            custom=list(self.custom_extensions),
            custom_count=len(self.custom_extensions),
            pending_input=self.pending_input,
            error=self.error_message or None,
            last_load_error=self.last_load_error,
        )

    def _rollback_toggle(self, key: str, *, had_entry: bool, previous: bool, flipped: bool) -> None:
        # A reload may already have replaced the optimistic value.
        if self.selection.get(key) != flipped:
            return
        selection = dict(self.selection)
        if had_entry:
            selection[key] = previous
        else:
            selection.pop(key, None)
        self.selection = selection


def _user_message(exc: TransportError, fallback: str) -> str:
    if isinstance(exc, StructuredServerError):
        return exc.status_message
    return fallback
