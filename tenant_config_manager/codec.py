# =============================================================
#  tenant_config_manager/codec.py
# =============================================================
"""Canonical text form of a :class:`ConfigurationDocument`.

Persisted shape (JSON shown, YAML and TOML carry the same tree)::

    {
        "setting_groups": {
            "forest": {"enabled": true, "interval": 30}
        }
    }

``decode`` never raises for bad input. It returns a :class:`DecodeResult`
that tells an *unrecognized member* apart from malformed text, because only
the former can be repaired by stripping the member and decoding again.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import tomli_w
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import to_jsonable_python

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .document import ConfigurationDocument

__all__ = ["DocumentCodec", "DecodeResult", "DecodeStatus", "detect_format"]

log = logging.getLogger(__name__)

FORMATS = ("json", "yaml", "toml")


class DecodeStatus(str, Enum):
    OK = "ok"
    UNRECOGNIZED = "unrecognized"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class DecodeResult:
    status: DecodeStatus
    member: Optional[str] = None
    path: Tuple[Union[str, int], ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.OK

    def __str__(self) -> str:
        if self.status is DecodeStatus.UNRECOGNIZED:
            return f"unrecognized member '{'.'.join(map(str, self.path))}'"
        if self.status is DecodeStatus.MALFORMED:
            return f"malformed ({self.error})"
        return "ok"


class _PersistedDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    setting_groups: Dict[str, Dict[str, Any]] = {}


def detect_format(path: Path | str) -> str:
    ext = Path(path).suffix.lower().lstrip(".")
    return {"yml": "yaml", "yaml": "yaml", "toml": "toml"}.get(ext, "json")


class DocumentCodec:
    def __init__(self, file_format: str = "json"):
        fmt = file_format.lower()
        if fmt == "yml":
            fmt = "yaml"
        if fmt not in FORMATS:
            raise ValueError(f"file_format must be one of {FORMATS}, got '{file_format}'")
        self.file_format = fmt

    # ------------ encode --------------------------------------------- #

    def encode(self, document: ConfigurationDocument) -> str | None:
        """Return canonical text, or ``None`` if the document cannot be formatted."""
        try:
            data = to_jsonable_python({"setting_groups": document.snapshot()})
            return self._render(data)
        except Exception as exc:
            log.warning("Could not format config document: %s", exc, exc_info=True)
            return None

    # ------------ decode --------------------------------------------- #

    def decode(self, text: str, into: ConfigurationDocument) -> DecodeResult:
        """Merge *text* into *into*; the document is left untouched on failure."""
        try:
            tree = self._parse(text)
        except (ValueError, yaml.YAMLError) as exc:
            return DecodeResult(DecodeStatus.MALFORMED, error=str(exc))

        try:
            persisted = _PersistedDocument.model_validate(tree)
        except ValidationError as exc:
            for err in exc.errors():
                if err["type"] == "extra_forbidden":
                    loc = tuple(err["loc"])
                    return DecodeResult(
                        DecodeStatus.UNRECOGNIZED, member=str(loc[-1]), path=loc
                    )
            return DecodeResult(DecodeStatus.MALFORMED, error=str(exc))

        into.merge(persisted.setting_groups)
        return DecodeResult(DecodeStatus.OK)

    def strip_member(self, text: str, path: Tuple[Union[str, int], ...]) -> str:
        """Return *text* without the member at *path*."""
        if not path:
            raise ValueError("path must name a member")
        tree = self._parse(text)
        parent = tree
        for key in path[:-1]:
            parent = parent[key]
        del parent[path[-1]]
        return self._render(tree)

    # ------------ format plumbing ------------------------------------ #

    def _parse(self, text: str) -> Any:
        if self.file_format == "yaml":
            return yaml.safe_load(text) or {}
        if self.file_format == "toml":
            return tomllib.loads(text)
        return json.loads(text)

    def _render(self, data: Dict[str, Any]) -> str:
        if self.file_format == "yaml":
            return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        if self.file_format == "toml":
            return tomli_w.dumps(data)
        return json.dumps(data, indent=4, ensure_ascii=False, default=to_jsonable_python)
