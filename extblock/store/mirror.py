"""Advisory on-disk mirror of the derived selection map."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from extblock.models import SelectionMap

DEFAULT_MIRROR_KEY = "selectedExtensions"

_LOG = logging.getLogger(__name__)


def default_mirror_path() -> Path:
    """Return the default selection mirror file location."""
    xdg_state_home = os.environ.get("XDG_STATE_HOME")
    if xdg_state_home:
        return Path(xdg_state_home).expanduser() / "extblock" / "selection.json"
    return Path.home() / ".local" / "state" / "extblock" / "selection.json"


class SelectionMirror:
    """Key-value JSON file holding the last reconciled selection map.

    Writes are best-effort. Session state is never restored from the mirror;
    `read` only backs the diagnostic CLI command.
    """

    def __init__(self, path: Path, *, key: str = DEFAULT_MIRROR_KEY) -> None:
        self.path = path
        self.key = key

    def write(self, selection: SelectionMap) -> bool:
        document = self._read_document()
        document[self.key] = dict(sorted(selection.items()))
        text = json.dumps(document, indent=2, sort_keys=True) + "\n"
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            _LOG.warning("unable to write selection mirror %s: %s", self.path, exc)
            return False
        return True

    def read(self) -> SelectionMap | None:
        value = self._read_document().get(self.key)
        if not isinstance(value, dict):
            return None
        return {str(name): bool(flag) for name, flag in value.items()}

    def _read_document(self) -> dict[str, object]:
        if not self.path.is_file():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            _LOG.debug("ignoring unreadable selection mirror %s: %s", self.path, exc)
            return {}
        return payload if isinstance(payload, dict) else {}
