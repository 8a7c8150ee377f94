"""Even partitioning of unit counts."""


def even_split(total: int, parts: int) -> list[int]:
    """Split ``total`` into ``parts`` sizes that differ by at most one.

    The remainder goes to the first parts, so sizes are non-increasing:
    ``even_split(7, 3) == [3, 2, 2]``. Used both to partition a region's
    units into groups and to spread combat damage over those groups.

    Args:
        total: Amount to distribute (>= 0)
        parts: Number of buckets (> 0)

    Returns:
        List of ``parts`` sizes summing to ``total``

    Raises:
        ValueError: If parts is not positive or total is negative
    """
    if parts <= 0:
        raise ValueError(f"Invalid parts: {parts} (must be > 0)")
    if total < 0:
        raise ValueError(f"Invalid total: {total} (must be >= 0)")

    base, extra = divmod(total, parts)
    return [base + 1 if i < extra else base for i in range(parts)]
