"""
Artifact lifecycle management.

Derives timestamped artifact names from a family prefix, and removes
stale members of a family from a directory. Purging is typically run
at application startup; it has no awareness of files another writer
currently has open, so callers serialize it against saves that use the
same prefix.
"""

import logging
import os
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from logcourier.artifacts.models import Artifact, PurgeResult
from logcourier.artifacts.storage import PART_SUFFIX, delete_file
from logcourier.core.models import ArtifactFormat

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
_TIMESTAMP_PATTERN = re.compile(r"(\d{8}_\d{6})")


def _join_prefix(prefix: str) -> str:
    """Prefix followed by exactly one '_' separator."""
    return prefix if prefix.endswith("_") else f"{prefix}_"


def make_name(prefix: str, timestamp: datetime, ext: str = "log") -> str:
    """
    Format a deterministic artifact name.

    Produces ``<prefix>_<yyyyMMdd_HHmmss>.<ext>``. A prefix that already
    ends in '_' is not given a second separator.

    Args:
        prefix: Family prefix, e.g. "myapp_log_"
        timestamp: Time to encode (24-hour clock)
        ext: Extension without the dot

    Returns:
        The artifact file name
    """
    ext = ext.lstrip(".")
    return f"{_join_prefix(prefix)}{timestamp.strftime(TIMESTAMP_FORMAT)}.{ext}"


def make_timestamped_name(
    prefix: str,
    ext: str = "log",
    clock: Callable[[], datetime] | None = None,
) -> str:
    """Name an artifact with the current local time (or clock())."""
    now = clock() if clock is not None else datetime.now()
    return make_name(prefix, now, ext)


def parse_timestamp(name: str, prefix: str) -> datetime | None:
    """Decode the timestamp encoded in an artifact name, if any."""
    if not name.startswith(prefix):
        return None
    match = _TIMESTAMP_PATTERN.match(name[len(_join_prefix(prefix)) :]) or (
        _TIMESTAMP_PATTERN.match(name[len(prefix) :])
    )
    if match is None:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def _family_members(directory: Path, prefix: str) -> list[Path]:
    """
    Immediate children of directory whose names start with prefix.

    A missing directory has no members. Other listing errors propagate.
    """
    try:
        return sorted(p for p in directory.iterdir() if p.name.startswith(prefix))
    except FileNotFoundError:
        return []


def purge(
    directory: str | os.PathLike,
    prefix: str,
    older_than: timedelta | None = None,
    now: datetime | None = None,
) -> PurgeResult:
    """
    Remove every artifact of a family from a directory.

    Matches are deleted with the recursive delete_file, so a matching
    directory goes too. A missing directory is a no-op.

    Args:
        directory: Directory whose immediate children are scanned
        prefix: Family prefix to match
        older_than: Only delete artifacts whose encoded timestamp is
                    older than this; names without a timestamp are kept.
                    None deletes every match.
        now: Reference time for older_than (default: current local time)

    Returns:
        PurgeResult listing removed paths and failures
    """
    root = Path(directory)
    result = PurgeResult(directory=root, prefix=prefix)
    cutoff = None
    if older_than is not None:
        cutoff = (now or datetime.now()) - older_than

    try:
        members = _family_members(root, prefix)
    except OSError as e:
        logger.warning(f"Cannot list {root} for purging: {e}")
        result.errors.append(str(root))
        return result

    for path in members:
        if cutoff is not None:
            created = parse_timestamp(path.name, prefix)
            if created is None or created >= cutoff:
                continue

        if delete_file(path):
            result.deleted.append(path)
        else:
            result.errors.append(str(path))

    if result.deleted:
        logger.info(f"Purged {len(result.deleted)} '{prefix}' artifacts from {root}")
    if result.errors:
        logger.warning(f"Could not purge {len(result.errors)} artifacts from {root}")
    return result


def list_artifacts(directory: str | os.PathLike, prefix: str) -> list[Artifact]:
    """
    List the artifacts of a family, newest first.

    In-progress ``.part`` files are not included; they are hidden and do
    not start with the prefix.
    """
    root = Path(directory)
    try:
        members = _family_members(root, prefix)
    except OSError as e:
        logger.warning(f"Cannot list {root}: {e}")
        return []

    artifacts = []
    for path in members:
        if path.name.endswith(PART_SUFFIX):
            continue
        try:
            size = path.stat().st_size if path.is_file() else None
        except OSError:
            size = None
        artifacts.append(
            Artifact(
                path=path.absolute(),
                prefix=prefix,
                created_at=parse_timestamp(path.name, prefix),
                format=ArtifactFormat.for_name(path.name),
                size_bytes=size,
            )
        )

    artifacts.sort(key=lambda a: (a.created_at or datetime.min, a.path.name), reverse=True)
    return artifacts
