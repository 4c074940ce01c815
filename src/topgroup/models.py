"""Data models for top-group."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType


class SnapshotIntegrityError(ValueError):
    """Raised when a process reports memory figures that cannot be consistent."""


@dataclass(slots=True, frozen=True)
class MemoryUsage:
    """Memory usage statistics of a process or a group of processes, in kB."""

    memory: int  # resident - shared
    resident: int
    shared: int

    def __post_init__(self) -> None:
        if self.resident < 0 or self.shared < 0:
            raise SnapshotIntegrityError(
                f"negative memory figures: resident={self.resident} shared={self.shared}"
            )
        if self.shared > self.resident:
            raise SnapshotIntegrityError(
                f"shared ({self.shared} kB) exceeds resident ({self.resident} kB)"
            )
        if self.memory != self.resident - self.shared:
            raise SnapshotIntegrityError(
                f"memory ({self.memory} kB) is not resident - shared "
                f"({self.resident} - {self.shared} kB)"
            )

    @classmethod
    def from_kb(cls, resident: int, shared: int) -> "MemoryUsage":
        """Build a usage from resident and shared sizes, deriving private memory."""
        return cls(memory=resident - shared, resident=resident, shared=shared)

    @classmethod
    def zero(cls) -> "MemoryUsage":
        """Identity element for addition."""
        return cls(memory=0, resident=0, shared=0)

    def __add__(self, other: "MemoryUsage") -> "MemoryUsage":
        if not isinstance(other, MemoryUsage):
            return NotImplemented
        return MemoryUsage(
            memory=self.memory + other.memory,
            resident=self.resident + other.resident,
            shared=self.shared + other.shared,
        )

    def __radd__(self, other: object) -> "MemoryUsage":
        # sum() starts from the integer 0
        if other == 0:
            return self
        return NotImplemented


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """One process as read from the process table.

    Any of the figures may be missing when the process vanished or could
    not be read; such records are skipped by the aggregator.
    """

    pid: int
    exe_basename: bytes | None
    resident: int | None  # kB
    shared: int | None  # kB

    @property
    def is_complete(self) -> bool:
        """Whether every figure needed for aggregation is present."""
        return (
            self.exe_basename is not None
            and self.resident is not None
            and self.shared is not None
        )


class ProcessGroup:
    """Processes sharing an executable basename."""

    __slots__ = ("_pid_to_usage", "_usage_totals", "_sealed")

    def __init__(self) -> None:
        self._pid_to_usage: dict[int, MemoryUsage] = {}
        self._usage_totals = MemoryUsage.zero()
        self._sealed = False

    @property
    def pid_to_usage(self) -> Mapping[int, MemoryUsage]:
        """Read-only PID to memory usage mapping."""
        return MappingProxyType(self._pid_to_usage)

    @property
    def usage_totals(self) -> MemoryUsage:
        """Total memory usage for all PIDs in the group."""
        return self._usage_totals

    def _add_usage(self, pid: int, usage: MemoryUsage) -> None:
        """
        Record the usage of a process and update the totals.

        A PID seen twice replaces its earlier usage; the totals are then
        re-derived from the mapping so the old usage is not counted.
        Groups handed out by a GroupedSnapshot are sealed and refuse this.
        """
        if self._sealed:
            raise TypeError("process group belongs to a finished snapshot")
        replaced = pid in self._pid_to_usage
        self._pid_to_usage[pid] = usage
        if replaced:
            self._usage_totals = sum(self._pid_to_usage.values(), MemoryUsage.zero())
        else:
            self._usage_totals = self._usage_totals + usage

    def __len__(self) -> int:
        return len(self._pid_to_usage)

    def __repr__(self) -> str:
        return (
            f"ProcessGroup(pid_to_usage={self._pid_to_usage!r}, "
            f"usage_totals={self._usage_totals!r})"
        )


class GroupedSnapshot(Mapping[bytes, ProcessGroup]):
    """Running processes grouped by executable basename."""

    __slots__ = ("_name_to_group",)

    def __init__(self, name_to_group: dict[bytes, ProcessGroup] | None = None) -> None:
        groups = dict(name_to_group or {})
        for group in groups.values():
            group._sealed = True
        self._name_to_group = MappingProxyType(groups)

    @property
    def name_to_group(self) -> Mapping[bytes, ProcessGroup]:
        """Executable basename to process group."""
        return self._name_to_group

    def __getitem__(self, name: bytes) -> ProcessGroup:
        return self._name_to_group[name]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._name_to_group)

    def __len__(self) -> int:
        return len(self._name_to_group)

    def __repr__(self) -> str:
        return f"GroupedSnapshot({dict(self._name_to_group)!r})"
