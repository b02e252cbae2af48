"""
Range Merger - Coalesce Half-Open Ranges

Merges overlapping or touching [start, end) ranges into a sorted,
non-overlapping list. Used to keep the range sets flowing through the
almanac pipeline compact between stages.
"""


def merge_all_ranges(ranges):
    """
    Merge all overlapping or touching half-open ranges in a single pass.

    Args:
        ranges: Iterable of (start, end) tuples, end exclusive

    Returns:
        list: Fully merged list of non-empty, non-touching ranges, sorted by
              start position

    Algorithm:
        1. Drop empty ranges (end <= start)
        2. Sort remaining ranges by start position
        3. For each range, try to merge with the last merged range
        4. If current.start <= last.end, the two share or touch a boundary,
           so extend the last range
        5. Otherwise, add current range as a new separate range

    Time Complexity: O(n log n) where n is the number of ranges
    Space Complexity: O(n) for the output list
    """
    sorted_ranges = sorted((start, end) for start, end in ranges if end > start)
    if not sorted_ranges:
        return []

    merged = [sorted_ranges[0]]

    for current_start, current_end in sorted_ranges[1:]:
        last_start, last_end = merged[-1]

        # [a, b) and [b, c) cover [a, c) without a gap
        if current_start <= last_end:
            merged[-1] = (last_start, max(last_end, current_end))
        else:
            merged.append((current_start, current_end))

    return merged


def calculate_total_coverage(ranges):
    """
    Calculate total number of integers covered by all ranges.

    Args:
        ranges: List of (start, end) tuples, end exclusive

    Returns:
        int: Total count of unique integers in all ranges
    """
    total = 0
    for start, end in merge_all_ranges(ranges):
        total += end - start
    return total
