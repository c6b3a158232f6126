"""Path and file helpers shared by the storage adapters and the orchestrator."""

import os
import tempfile
from pathlib import Path

from diffmend.core.errors import PathSecurityError


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write bytes to a file atomically using temp file + rename.

    The temporary file lives next to the target so the final rename never
    crosses a filesystem boundary.
    """
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, str(path))
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def detect_line_ending(content: str) -> str:
    """Detect the predominant line ending style in content.

    Returns:
        "\\r\\n" (CRLF - Windows), "\\n" (LF - Unix), "\\r" (CR - legacy)
    """
    if '\r\n' in content:
        return '\r\n'
    elif '\r' in content:
        return '\r'
    return '\n'


def path_segments(path: str) -> list[str]:
    """Split a patch path into its non-empty segments.

    Patch files always use forward slashes, but backslashes from Windows
    tools are accepted as well.
    """
    return [part for part in path.replace("\\", "/").split("/") if part and part != "."]


def strip_path_segments(path: str, count: int) -> str:
    """Remove `count` leading segments from a patch path.

    Stripping only happens while at least one segment remains, so asking for
    more segments than the path has leaves it unchanged.

    Example:
        >>> strip_path_segments("a/src/main.c", 1)
        'src/main.c'
        >>> strip_path_segments("main.c", 3)
        'main.c'
    """
    segments = path_segments(path)
    if 0 < count < len(segments):
        segments = segments[count:]
    return "/".join(segments)


def resolve_under(root: Path, rel: str) -> Path:
    """Resolve a relative patch path under root, refusing escapes.

    Raises:
        PathSecurityError: If the path is absolute or resolves outside root.
    """
    if rel.startswith("/") or rel.startswith("~") or Path(rel).is_absolute():
        raise PathSecurityError(rel, "absolute paths are not allowed")
    base = root.resolve()
    resolved = (base / rel).resolve()
    if not resolved.is_relative_to(base):
        raise PathSecurityError(rel, "path escapes the patch root")
    return resolved
