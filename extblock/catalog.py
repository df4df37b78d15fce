"""Joint loading of the custom and fixed extension collections."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Protocol, TypeVar

from extblock.errors import TransportError
from extblock.models import AllExtensionsPayload, Catalog, FixedExtension

_LOG = logging.getLogger(__name__)

_T = TypeVar("_T")


class CatalogSource(Protocol):
    def list_all(self) -> AllExtensionsPayload: ...

    def list_blocked_fixed(self) -> list[FixedExtension]: ...


def load_catalog(source: CatalogSource) -> Catalog:
    """Fetch both collections concurrently; fail if either request fails."""
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=2, thread_name_prefix="extblock-catalog"
    ) as executor:
        all_future = executor.submit(source.list_all)
        blocked_future = executor.submit(source.list_blocked_fixed)
        all_payload = _join(all_future)
        blocked = _join(blocked_future)

    _LOG.debug(
        "catalog loaded: custom=%d fixed=%d blocked=%d",
        len(all_payload.custom),
        len(all_payload.fixed),
        len(blocked),
    )
    return Catalog(
        custom_extensions=list(all_payload.custom),
        fixed_all=list(all_payload.fixed),
        fixed_blocked=list(blocked),
    )


def _join(future: concurrent.futures.Future[_T]) -> _T:
    try:
        return future.result()
    except TransportError:
        raise
    except OSError as exc:
        raise TransportError(f"catalog request failed: {exc}") from exc
