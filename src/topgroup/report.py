"""Plain-text report of a grouped snapshot."""

from topgroup.models import GroupedSnapshot, MemoryUsage, ProcessGroup

SI_PREFIXES = ["", "k", "M", "G", "T", "P", "E"]

NAME_WIDTH = 30


def format_si(num_bytes: int) -> str:
    """Format bytes as a human-readable string using SI (base 1000) prefixes."""
    if num_bytes < 1000:
        return f"{num_bytes} B"
    size = float(num_bytes)
    for prefix in SI_PREFIXES[1:]:
        size = size / 1000
        # compare the printed value, so 999.999 moves up a prefix
        if round(size, 2) < 1000:
            return f"{size:.2f} {prefix}B"
    return f"{size:.2f} {SI_PREFIXES[-1]}B"


def format_kb(kilobytes: int) -> str:
    """Format a kB figure from the process table."""
    return format_si(kilobytes * 1000)


def display_name(basename: bytes) -> str:
    """Decode an executable basename for display, replacing undecodable bytes."""
    return basename.decode("utf-8", errors="replace")


def rank_groups(snapshot: GroupedSnapshot) -> list[tuple[bytes, ProcessGroup]]:
    """Groups ordered by private memory, largest first, ties by name."""
    return sorted(
        snapshot.name_to_group.items(),
        key=lambda item: (-item[1].usage_totals.memory, item[0]),
    )


def render_report(snapshot: GroupedSnapshot, limit: int | None = None) -> list[str]:
    """Render one line per group: name and private memory."""
    ranked = rank_groups(snapshot)
    if limit is not None:
        ranked = ranked[:limit]
    return [
        f"{display_name(name):{NAME_WIDTH}} {format_kb(group.usage_totals.memory)}"
        for name, group in ranked
    ]


def _usage_fields(usage: MemoryUsage) -> str:
    return (
        f"memory={format_kb(usage.memory)} "
        f"resident={format_kb(usage.resident)} "
        f"shared={format_kb(usage.shared)}"
    )


def render_debug(snapshot: GroupedSnapshot) -> list[str]:
    """Render every group with its totals and per-PID usage."""
    lines = []
    for name, group in rank_groups(snapshot):
        lines.append(f"{display_name(name)} ({len(group)} processes): "
                     f"{_usage_fields(group.usage_totals)}")
        for pid in sorted(group.pid_to_usage):
            lines.append(f"    {pid:>8} {_usage_fields(group.pid_to_usage[pid])}")
    return lines
