"""Process table reading for top-group."""

import os
from collections.abc import Iterator

import psutil

from topgroup.grouping import group_processes
from topgroup.models import GroupedSnapshot, ProcessRecord


# Attributes fetched per process by process_iter
PROCESS_ATTRS = ["pid", "exe", "memory_info"]


def _basename(exe: str | None) -> bytes | None:
    """Final component of an executable path, as raw OS bytes."""
    if not exe:
        return None
    name = os.path.basename(os.fsencode(exe))
    return name or None


def _to_kb(num_bytes: int | None) -> int | None:
    if num_bytes is None:
        return None
    return num_bytes // 1024


def iter_process_records() -> Iterator[ProcessRecord]:
    """
    Yield a record for every process in the process table.

    Uses psutil.process_iter() with a prefetched attribute list: a process
    that exits while being read is left out, and one that is denied or has
    become a zombie comes back with missing figures instead of raising. Records are yielded lazily
    and may be incomplete; the aggregator decides what to skip.
    """
    for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
        info = proc.info
        mem_info = info.get("memory_info")
        # Only some platforms report a shared size
        shared = getattr(mem_info, "shared", None) if mem_info else None
        resident = mem_info.rss if mem_info and shared is not None else None

        yield ProcessRecord(
            pid=info.get("pid", proc.pid),
            exe_basename=_basename(info.get("exe")),
            resident=_to_kb(resident),
            shared=_to_kb(shared),
        )


def take_snapshot(strict: bool = False) -> GroupedSnapshot:
    """Read the process table once and group it by executable basename."""
    return group_processes(iter_process_records(), strict=strict)
