"""Tests for the top-group terminal UI."""

import pytest
from textual.widgets import DataTable

from topgroup.app import GroupTable, PidTable, SortKey, TopGroupApp
from topgroup.grouping import group_processes
from topgroup.models import GroupedSnapshot, ProcessRecord, SnapshotIntegrityError


def sample_snapshot() -> GroupedSnapshot:
    return group_processes(
        [
            ProcessRecord(pid=100, exe_basename=b"nginx", resident=5000, shared=1000),
            ProcessRecord(pid=101, exe_basename=b"nginx", resident=3000, shared=500),
            ProcessRecord(pid=200, exe_basename=b"sshd", resident=2000, shared=0),
            ProcessRecord(pid=300, exe_basename=b"java", resident=1000, shared=900),
        ]
    )


class TestSortKey:
    """Tests for SortKey enum."""

    def test_sort_key_values(self):
        """Test SortKey enum has expected values."""
        assert SortKey.MEMORY.value == "memory"
        assert SortKey.RESIDENT.value == "resident"
        assert SortKey.SHARED.value == "shared"
        assert SortKey.NAME.value == "name"

    def test_sort_key_members(self):
        """Test SortKey enum has all expected members."""
        assert list(SortKey) == [SortKey.MEMORY, SortKey.RESIDENT, SortKey.SHARED, SortKey.NAME]


def group_names(app: TopGroupApp) -> list[bytes]:
    """Basenames in the order the group table shows them."""
    group_table = app.query_one(GroupTable)
    table = app.query_one("#group-table", DataTable)
    return [group_table.group_name(row_key.value) for row_key in table.rows]


@pytest.mark.asyncio
async def test_app_creation():
    """Test TopGroupApp can be instantiated."""
    app = TopGroupApp(sample_snapshot)
    assert app.title == "top-group"
    assert len(app.snapshot) == 0


@pytest.mark.asyncio
async def test_app_compose():
    """Test TopGroupApp composes its tables."""
    app = TopGroupApp(sample_snapshot)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#group-table") is not None
        assert pilot.app.query_one("#pid-table") is not None


@pytest.mark.asyncio
async def test_app_shows_groups_by_memory():
    """Test the first snapshot is shown sorted by private memory."""
    app = TopGroupApp(sample_snapshot)
    async with app.run_test() as pilot:
        await pilot.pause()
        assert group_names(pilot.app) == [b"nginx", b"sshd", b"java"]
        assert pilot.app.sub_title == "3 executables"


@pytest.mark.asyncio
async def test_highlighted_group_shows_pids():
    """Test the PID table follows the cursor in the group table."""
    app = TopGroupApp(sample_snapshot)
    async with app.run_test() as pilot:
        await pilot.pause()
        pid_table = pilot.app.query_one("#pid-table", DataTable)
        assert [key.value for key in pid_table.rows] == ["100", "101"]

        pilot.app.query_one("#group-table", DataTable).move_cursor(row=1)
        await pilot.pause()
        assert [key.value for key in pid_table.rows] == ["200"]


@pytest.mark.asyncio
async def test_app_sort_binding():
    """Test that F6 cycles the sort key and reorders the groups."""
    app = TopGroupApp(sample_snapshot)
    async with app.run_test() as pilot:
        await pilot.pause()
        group_table = pilot.app.query_one(GroupTable)
        assert group_table.sort_key == SortKey.MEMORY

        await pilot.press("f6")
        assert group_table.sort_key == SortKey.RESIDENT
        assert group_names(pilot.app) == [b"nginx", b"sshd", b"java"]

        await pilot.press("f6")
        assert group_table.sort_key == SortKey.SHARED
        assert group_names(pilot.app) == [b"nginx", b"java", b"sshd"]

        await pilot.press("f6")
        assert group_table.sort_key == SortKey.NAME
        assert group_names(pilot.app) == [b"java", b"nginx", b"sshd"]

        await pilot.press("f6")
        assert group_table.sort_key == SortKey.MEMORY


@pytest.mark.asyncio
async def test_app_refresh_binding():
    """Test that r takes a new snapshot."""
    calls = []

    def factory():
        calls.append(1)
        return sample_snapshot()

    app = TopGroupApp(factory)
    async with app.run_test() as pilot:
        await pilot.pause()
        assert len(calls) == 1

        await pilot.press("r")
        await pilot.pause()
        assert len(calls) == 2


@pytest.mark.asyncio
async def test_app_keeps_snapshot_on_integrity_error():
    """Test a failed strict snapshot leaves the previous one on screen."""
    snapshots = [sample_snapshot()]

    def factory():
        if snapshots:
            return snapshots.pop()
        raise SnapshotIntegrityError("pid 1: shared exceeds resident")

    app = TopGroupApp(factory)
    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("r")
        await pilot.pause()
        assert len(pilot.app.snapshot) == 3
        assert group_names(pilot.app) == [b"nginx", b"sshd", b"java"]


@pytest.mark.asyncio
async def test_app_empty_snapshot():
    """Test an empty snapshot shows empty tables."""
    app = TopGroupApp(GroupedSnapshot)
    async with app.run_test() as pilot:
        await pilot.pause()
        assert pilot.app.query_one("#group-table", DataTable).row_count == 0
        assert pilot.app.query_one(PidTable) is not None


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' binding triggers quit."""
    app = TopGroupApp(sample_snapshot)
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert pilot.app._exit


def tied_snapshot() -> GroupedSnapshot:
    return group_processes(
        [
            ProcessRecord(pid=1, exe_basename=b"zsh", resident=1000, shared=100),
            ProcessRecord(pid=2, exe_basename=b"bash", resident=1000, shared=500),
            ProcessRecord(pid=3, exe_basename=b"fish", resident=1000, shared=0),
        ]
    )


@pytest.mark.asyncio
async def test_equal_figures_ordered_by_name():
    """Test groups with equal resident totals are listed by name."""
    app = TopGroupApp(tied_snapshot)
    async with app.run_test() as pilot:
        await pilot.pause()
        assert group_names(pilot.app) == [b"fish", b"zsh", b"bash"]

        await pilot.press("f6")
        assert pilot.app.query_one(GroupTable).sort_key == SortKey.RESIDENT
        assert group_names(pilot.app) == [b"bash", b"fish", b"zsh"]


@pytest.mark.asyncio
async def test_limit_keeps_largest_groups():
    """Test the group limit keeps the groups using the most memory."""
    app = TopGroupApp(sample_snapshot, limit=2)
    async with app.run_test() as pilot:
        await pilot.pause()
        assert group_names(pilot.app) == [b"nginx", b"sshd"]

        for _ in range(3):
            await pilot.press("f6")
        assert pilot.app.query_one(GroupTable).sort_key == SortKey.NAME
        assert group_names(pilot.app) == [b"nginx", b"sshd"]
