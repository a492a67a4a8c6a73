"""Per-file timestamps for Folio.

The build asks an external process for the last-modified time, last author
and creation time of every content file. The process prints a JSON array
on stdout; each element looks like::

    {"filepath": "content/about.md", "then": 1700000000000,
     "by": "Ada", "createdAt": 1690000000000}

Times are milliseconds since the epoch. The default provider is this
module itself (``folio timestamps``), which reads the dates from git.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath
from typing import Any

from .content import discover_content
from .errors import TimestampProviderError
from .utils import relative_posix

_FIELD_SEP = "\x1f"


@dataclass(frozen=True)
class TimestampRecord:
    """Timestamps of one content file.

    Attributes:
        filepath: Path of the file relative to the project root, POSIX form.
        then: Last modification time in milliseconds.
        by: Identity of the last modifier.
        created_at: Creation time in milliseconds.
    """

    filepath: str
    then: float
    by: str
    created_at: float

    @classmethod
    def from_json(cls, item: dict[str, Any], project_root: Path) -> TimestampRecord:
        return cls(
            filepath=normalize_filepath(item["filepath"], project_root),
            then=_millis(item, "then"),
            by=item["by"],
            created_at=_millis(item, "createdAt"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "filepath": self.filepath,
            "then": self.then,
            "by": self.by,
            "createdAt": self.created_at,
        }


def _millis(item: dict[str, Any], key: str) -> float:
    value = item[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {value!r}")
    return value


def normalize_filepath(filepath: str, project_root: Path) -> str:
    """Bring a provider path into the form used for content files."""
    if "\\" in filepath:
        filepath = PureWindowsPath(filepath).as_posix()
    return relative_posix(filepath, project_root)


def load_timestamps(command: list[str], project_root: Path) -> list[TimestampRecord]:
    """Run the timestamp provider and parse its output.

    Args:
        command: Provider argv.
        project_root: Working directory for the provider.

    Returns:
        List of TimestampRecord in provider order.

    Raises:
        TimestampProviderError: If the provider fails or its output is unusable.
    """
    source = Path(command[0])
    try:
        result = subprocess.run(
            command, cwd=project_root, capture_output=True, text=True
        )
    except OSError as exc:
        raise TimestampProviderError(
            source, f"Could not start timestamp provider: {exc}", exc
        ) from exc
    if result.returncode != 0:
        raise TimestampProviderError(
            source,
            f"Timestamp provider exited with status {result.returncode}: "
            f"{result.stderr.strip()}",
        )
    try:
        payload = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise TimestampProviderError(
            source, f"Timestamp provider emitted invalid JSON: {exc}", exc
        ) from exc
    if not isinstance(payload, list):
        raise TimestampProviderError(
            source, "Timestamp provider must emit a JSON array"
        )
    try:
        return [TimestampRecord.from_json(item, project_root) for item in payload]
    except (KeyError, TypeError) as exc:
        raise TimestampProviderError(
            source, f"Malformed timestamp record: {exc!r}", exc
        ) from exc


def find_timestamp(
    records: list[TimestampRecord], filepath: str
) -> TimestampRecord | None:
    """Return the first record for ``filepath``, or None."""
    for record in records:
        if record.filepath == filepath:
            return record
    return None


def collect_timestamps(content_dir: Path, project_root: Path) -> list[TimestampRecord]:
    """Read timestamps of every content file from git history.

    Files git does not track fall back to their modification time for both
    times and an empty author.

    Args:
        content_dir: Directory holding content files.
        project_root: Repository working directory.

    Returns:
        One TimestampRecord per content file.
    """
    git_bin = shutil.which("git")
    records: list[TimestampRecord] = []
    for path in discover_content(content_dir):
        rel = relative_posix(path.resolve(), project_root.resolve())
        history = _git_history(git_bin, rel, project_root) if git_bin else []
        if history:
            then, by = history[0]
            created_at, _ = history[-1]
        else:
            then = created_at = int(path.stat().st_mtime * 1000)
            by = ""
        records.append(
            TimestampRecord(filepath=rel, then=then, by=by, created_at=created_at)
        )
    return records


def _git_history(git_bin: str, rel: str, project_root: Path) -> list[tuple[int, str]]:
    """Return (commit time ms, author) pairs for a file, newest first."""
    result = subprocess.run(
        [git_bin, "log", "--follow", f"--format=%at{_FIELD_SEP}%an", "--", rel],
        cwd=project_root,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return []
    history = []
    for line in result.stdout.splitlines():
        if _FIELD_SEP not in line:
            continue
        seconds, author = line.split(_FIELD_SEP, 1)
        history.append((int(seconds) * 1000, author))
    return history


def dump_timestamps(records: list[TimestampRecord]) -> str:
    """Serialize records in the provider wire format."""
    return json.dumps([record.to_json() for record in records], indent=2)
