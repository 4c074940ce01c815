"""Grouping of process records by executable basename."""

import logging
from collections.abc import Iterable

from topgroup.models import (
    GroupedSnapshot,
    MemoryUsage,
    ProcessGroup,
    ProcessRecord,
    SnapshotIntegrityError,
)

logger = logging.getLogger(__name__)


def group_processes(
    records: Iterable[ProcessRecord | None],
    strict: bool = False,
) -> GroupedSnapshot:
    """
    Fold process records into a GroupedSnapshot in a single pass.

    Missing records and records lacking the executable or memory figures are
    skipped; the process table is a racy view of a live system. A record whose
    shared size exceeds its resident size is skipped with a warning, or
    raises SnapshotIntegrityError when ``strict`` is set.

    Args:
        records: Process records, typically a generator over the process table.
        strict: Fail on the first inconsistent record instead of skipping it.

    Returns:
        The grouped snapshot. No records yield an empty snapshot.
    """
    groups: dict[bytes, ProcessGroup] = {}
    skipped = 0
    rejected = 0

    for record in records:
        if record is None or not record.is_complete:
            skipped += 1
            continue

        try:
            usage = MemoryUsage.from_kb(record.resident, record.shared)
        except SnapshotIntegrityError as exc:
            if strict:
                raise SnapshotIntegrityError(f"pid {record.pid}: {exc}") from exc
            logger.warning("Skipping pid %d: %s", record.pid, exc)
            rejected += 1
            continue

        group = groups.get(record.exe_basename)
        if group is None:
            group = groups[record.exe_basename] = ProcessGroup()
        group._add_usage(record.pid, usage)

    logger.debug(
        "Grouped into %d groups (%d incomplete records skipped, %d rejected)",
        len(groups),
        skipped,
        rejected,
    )
    return GroupedSnapshot(groups)
