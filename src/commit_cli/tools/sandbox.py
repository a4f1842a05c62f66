"""Read-only filesystem access confined to the repository root."""

import stat
from pathlib import Path, PurePosixPath, PureWindowsPath


class PathRejectedError(ValueError):
    """Raised when a requested path would leave the sandbox root."""


class WorkspaceSandbox:
    """Resolves model-supplied paths against a fixed root and reads from it.

    Every accessor is side-effect free.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def resolve(self, raw_path: str) -> Path:
        """Resolve ``raw_path`` inside the root.

        Raises:
            PathRejectedError: On parent-directory segments or when the
                resolved path (after following symlinks) escapes the root.
        """
        raw_path = (raw_path or ".").strip() or "."
        segments = set(PurePosixPath(raw_path).parts) | set(PureWindowsPath(raw_path).parts)
        if ".." in segments:
            raise PathRejectedError("Cannot access parent directories")

        candidate = Path(raw_path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        if not resolved.is_relative_to(self.root):
            raise PathRejectedError(f"Path is outside the repository: {raw_path}")
        return resolved

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix() or "."

    def file_size(self, path: Path) -> int:
        return path.stat().st_size

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def list_entries(self, path: Path) -> list[tuple[str, bool | None]]:
        """List ``(name, is_dir)`` pairs sorted by name.

        ``is_dir`` is None for entries whose stat lookup failed.
        """
        entries: list[tuple[str, bool | None]] = []
        for child in sorted(path.iterdir(), key=lambda p: p.name):
            try:
                is_dir: bool | None = stat.S_ISDIR(child.stat().st_mode)
            except OSError:
                is_dir = None
            entries.append((child.name, is_dir))
        return entries
