"""
Copyright (c) 2025, Josh Walker

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

1. Redistributions of source code must retain the above copyright notice, this
   list of conditions and the following disclaimer.

2. Redistributions in binary form must reproduce the above copyright notice,
   this list of conditions and the following disclaimer in the documentation
   and/or other materials provided with the distribution.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

Sorted genomic interval index built from BED regions.

All intervals are half-open [start, end) and live in a single list sorted by
(seq, start, end). Point lookups and the forward sweep used by the column
filter both run against that one list using bisect.
"""

import bisect
import logging
from dataclasses import dataclass

from .errors import BedParseError, UnsupportedBedError

logger = logging.getLogger(__name__)

# BED12 and anything wider is rejected
MAX_BED_FIELDS = 9


@dataclass(frozen=True, order=True)
class Range:
    """Half-open genomic interval on one sequence."""
    seq: str
    start: int
    end: int

    @property
    def width(self):
        return self.end - self.start

    def overlaps(self, seq, position):
        """True if position lies within this range on seq."""
        return self.seq == seq and self.start <= position < self.end

    def precedes(self, seq, position):
        """True if this range lies entirely before position in (seq, position) order."""
        return self.seq < seq or self.end <= position

    def succeeds(self, seq, position):
        """True if this range starts after position in (seq, position) order."""
        return self.seq > seq or self.start > position


class RangeIndex:
    """
    Immutable, sorted set of Ranges.

    Two kinds of query share the same sorted list:
    - contains_point(): the range with the greatest start at or before a
      point, taking the one that reaches furthest when starts tie
    - overlapping_ranges(): a forward sweep over the ranges that may touch
      a query interval, for merge-style scans alongside alignment columns
    """

    def __init__(self, ranges=()):
        self._ranges = tuple(sorted(set(ranges)))
        self._keys = [(r.seq, r.start) for r in self._ranges]
        # Furthest end seen so far within each sequence, for exact overlap tests
        self._reach = []
        reach = None
        for i, r in enumerate(self._ranges):
            if i == 0 or self._ranges[i - 1].seq != r.seq:
                reach = r.end
            else:
                reach = max(reach, r.end)
            self._reach.append(reach)

    def __len__(self):
        return len(self._ranges)

    def __iter__(self):
        return iter(self._ranges)

    def __bool__(self):
        return bool(self._ranges)

    def __eq__(self, other):
        if not isinstance(other, RangeIndex):
            return NotImplemented
        return self._ranges == other._ranges

    def __repr__(self):
        return f"RangeIndex({list(self._ranges)!r})"

    def _last_starting_at_or_before(self, seq, position):
        """Index of the last range with (seq, start) <= (seq, position), or -1."""
        return bisect.bisect_right(self._keys, (seq, position)) - 1

    def overlaps(self, seq, position):
        """True if any range on seq covers position."""
        i = self._last_starting_at_or_before(seq, position)
        if i < 0 or self._ranges[i].seq != seq:
            return False
        return self._reach[i] > position

    def contains_point(self, seq, position):
        """
        Test the range with the greatest (seq, start) not exceeding the point.

        This is what coverage masking uses. It only inspects one range, so if
        the input has overlapping ranges on one sequence, a long range that is
        followed by a shorter one can be missed:

            >>> index = RangeIndex([Range('chr1', 0, 100), Range('chr1', 10, 20)])
            >>> index.contains_point('chr1', 50)
            False
            >>> index.overlaps('chr1', 50)
            True
        """
        i = self._last_starting_at_or_before(seq, position)
        if i < 0:
            return False
        return self._ranges[i].overlaps(seq, position)

    def overlapping_ranges(self, query):
        """
        Lazily yield the ranges that may overlap query, in sorted order.

        Yields at most one range on query.seq starting strictly before
        query.start (in case it extends into the query), then every range on
        query.seq whose start lies within [query.start, query.end).

        Args:
            query (Range): Interval to sweep

        Returns:
            generator of Range
        """
        i = bisect.bisect_left(self._keys, (query.seq, query.start))
        if i > 0 and self._ranges[i - 1].seq == query.seq:
            yield self._ranges[i - 1]
        end_key = (query.seq, query.end)
        while i < len(self._ranges) and self._keys[i] < end_key:
            yield self._ranges[i]
            i += 1

    def total_width(self):
        """Sum of the widths of all ranges."""
        return sum(r.width for r in self._ranges)


def parse_bed(lines):
    """
    Parse BED3 regions into a RangeIndex.

    Only the first three fields are used. Blank lines and "#", "track" and
    "browser" header lines are skipped.

    Args:
        lines: Iterable of text lines

    Returns:
        RangeIndex

    Raises:
        UnsupportedBedError: If a line has more than 9 fields (BED12)
        BedParseError: If a line has fewer than 3 fields or bad coordinates
    """
    ranges = []
    for line_number, line in enumerate(lines, start=1):
        fields = line.split()
        if not fields or fields[0].startswith('#') or fields[0] in ('track', 'browser'):
            continue
        if len(fields) > MAX_BED_FIELDS:
            raise UnsupportedBedError(
                f"BED12 input not supported (line {line_number} has {len(fields)} fields)")
        if len(fields) < 3:
            raise BedParseError(f"BED line {line_number} has fewer than 3 fields: {line.rstrip()!r}")
        try:
            start = int(fields[1])
            end = int(fields[2])
        except ValueError:
            raise BedParseError(
                f"BED line {line_number} has non-integer coordinates: {line.rstrip()!r}") from None
        if start < 0 or end < start:
            raise BedParseError(f"BED line {line_number} has an invalid interval: {line.rstrip()!r}")
        ranges.append(Range(fields[0], start, end))

    index = RangeIndex(ranges)
    logger.debug(f"Loaded {len(index)} BED regions")
    return index
