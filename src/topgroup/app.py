"""top-group - Textual viewer for a single grouped snapshot."""

from collections.abc import Callable
from enum import Enum

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from topgroup.models import GroupedSnapshot, ProcessGroup, SnapshotIntegrityError
from topgroup.monitor import take_snapshot
from topgroup.report import display_name, format_kb, rank_groups


class SortKey(Enum):
    """Sort keys for the group table."""

    MEMORY = "memory"
    RESIDENT = "resident"
    SHARED = "shared"
    NAME = "name"


class GroupTable(Container):
    """Container for the process group table."""

    DEFAULT_CSS = """
    GroupTable {
        height: 2fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, limit: int | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._group_limit = limit
        self._sort_key: SortKey = SortKey.MEMORY
        self._snapshot = GroupedSnapshot()
        self._row_names: dict[str, bytes] = {}

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, redraw, and return it."""
        keys = list(SortKey)
        self._sort_key = keys[(keys.index(self._sort_key) + 1) % len(keys)]
        self.update_groups(self._snapshot)
        return self._sort_key

    def compose(self) -> ComposeResult:
        table = DataTable(id="group-table")
        table.cursor_type = "row"
        table.add_column("Name", key="name", width=30)
        table.add_column("Procs", key="count", width=6)
        table.add_column("Memory", key="memory", width=12)
        table.add_column("Resident", key="resident", width=12)
        table.add_column("Shared", key="shared", width=12)
        yield table

    def group_name(self, row_key: str) -> bytes | None:
        """Basename for a table row key."""
        return self._row_names.get(row_key)

    def update_groups(self, snapshot: GroupedSnapshot) -> None:
        """Replace the table contents with the groups of a snapshot."""
        self._snapshot = snapshot
        table = self.query_one("#group-table", DataTable)
        table.clear()
        self._row_names = {}
        for index, (name, group) in enumerate(self._sort_groups(snapshot)):
            row_key = str(index)
            self._row_names[row_key] = name
            totals = group.usage_totals
            table.add_row(
                display_name(name)[:30],
                str(len(group)),
                format_kb(totals.memory),
                format_kb(totals.resident),
                format_kb(totals.shared),
                key=row_key,
            )

    def _sort_groups(self, snapshot: GroupedSnapshot) -> list[tuple[bytes, ProcessGroup]]:
        """Keep the largest groups up to the limit and sort them by the current key."""
        ranked = rank_groups(snapshot)
        if self._group_limit is not None:
            ranked = ranked[: self._group_limit]
        if self._sort_key is SortKey.MEMORY:
            return ranked
        if self._sort_key is SortKey.NAME:
            return sorted(ranked, key=lambda item: item[0])
        field = self._sort_key.value
        return sorted(
            ranked,
            key=lambda item: (-getattr(item[1].usage_totals, field), item[0]),
        )


class PidTable(Container):
    """Per-PID breakdown of the highlighted group."""

    DEFAULT_CSS = """
    PidTable {
        height: 1fr;
        border: solid $secondary;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("", id="pid-title")
        table = DataTable(id="pid-table")
        table.add_column("PID", key="pid", width=8)
        table.add_column("Memory", key="memory", width=12)
        table.add_column("Resident", key="resident", width=12)
        table.add_column("Shared", key="shared", width=12)
        yield table

    def show_group(self, name: bytes | None, group: ProcessGroup | None) -> None:
        """Show the processes of a group, or nothing."""
        table = self.query_one("#pid-table", DataTable)
        table.clear()
        title = self.query_one("#pid-title", Static)
        if name is None or group is None:
            title.update("")
            return
        title.update(f"{display_name(name)}: {len(group)} processes")
        usages = group.pid_to_usage
        for pid in sorted(usages, key=lambda p: (-usages[p].memory, p)):
            usage = usages[pid]
            table.add_row(
                str(pid),
                format_kb(usage.memory),
                format_kb(usage.resident),
                format_kb(usage.shared),
                key=str(pid),
            )


class TopGroupApp(App):
    """Interactive view of processes grouped by executable."""

    TITLE = "top-group"
    SUB_TITLE = "Memory usage by executable"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
        ("r", "refresh", "Refresh"),
    ]

    def __init__(
        self,
        snapshot_factory: Callable[[], GroupedSnapshot] = take_snapshot,
        limit: int | None = None,
    ) -> None:
        """
        Initialize the TopGroupApp.

        Args:
            snapshot_factory: Called once on mount and on every refresh.
            limit: Only show this many groups, those using the most memory.
        """
        super().__init__()
        self._snapshot_factory = snapshot_factory
        self._group_limit = limit
        self._snapshot = GroupedSnapshot()

    @property
    def snapshot(self) -> GroupedSnapshot:
        """The snapshot currently displayed."""
        return self._snapshot

    def compose(self) -> ComposeResult:
        yield GroupTable(limit=self._group_limit)
        yield PidTable()
        yield Footer()

    def on_mount(self) -> None:
        """Take the first snapshot once the tables are in place."""
        self.call_after_refresh(self.action_refresh)

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.data_table.id == "group-table":
            self._show_highlighted()

    def _show_highlighted(self) -> None:
        """Show the PIDs of the group under the cursor."""
        table = self.query_one("#group-table", DataTable)
        name = self.query_one(GroupTable).group_name(str(table.cursor_row))
        group = self._snapshot.get(name) if name is not None else None
        self.query_one(PidTable).show_group(name, group)

    def action_refresh(self) -> None:
        """Take a new snapshot and display it."""
        try:
            self._snapshot = self._snapshot_factory()
        except SnapshotIntegrityError as exc:
            self.notify(str(exc), title="Inconsistent snapshot", severity="error")
            return
        self.query_one(GroupTable).update_groups(self._snapshot)
        self._show_highlighted()
        self.sub_title = f"{len(self._snapshot)} executables"

    def action_sort(self) -> None:
        """Cycle through sort keys."""
        new_sort_key = self.query_one(GroupTable).cycle_sort()
        self._show_highlighted()
        self.notify(f"Sort: {new_sort_key.value.upper()}")
