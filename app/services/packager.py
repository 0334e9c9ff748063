from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass

from app.services.errors import InvalidInputError

ENTRY_BASENAME = "index"

# Fixed member timestamp so identical source always yields identical archive bytes.
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)

_RUNTIME_EXTENSIONS: dict[str, str] = {
    "python": ".py",
    "nodejs": ".js",
    "ruby": ".rb",
}


@dataclass(frozen=True)
class FunctionArtifact:
    """Packaged code plus the runtime settings it is uploaded with.

    Built fresh for every deploy/update call and never written to disk.
    """

    archive: bytes
    runtime: str
    handler: str
    timeout: int
    memory_size: int
    description: str


def entry_filename(runtime: str) -> str:
    """Return the archive member name for a runtime, e.g. ``index.py`` for ``python3.12``."""

    family = runtime.rstrip("0123456789.x").lower()
    extension = _RUNTIME_EXTENSIONS.get(family)
    if extension is None:
        raise InvalidInputError(f"Unsupported runtime: {runtime!r}", operation="pack")
    return f"{ENTRY_BASENAME}{extension}"


def pack_source(source: str, *, runtime: str = "python3.12") -> bytes:
    """Zip a plain-text function body into an in-memory deployment archive."""

    if not source:
        raise InvalidInputError("source code must be provided", operation="pack")

    info = zipfile.ZipInfo(entry_filename(runtime), date_time=_FIXED_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr(info, source.encode("utf-8"))
    return buffer.getvalue()
