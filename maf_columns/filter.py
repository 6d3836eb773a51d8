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

Extraction of the alignment columns that fall inside BED regions.

The first aligned entry of a block is the reference. Its columns are swept
left to right alongside the sorted regions, and every maximal run of
reference bases covered by a region becomes a separate, narrower block.
"""

import logging
from dataclasses import dataclass

from .errors import UnsupportedStrandError
from .model import GAP, AlignedEntry, Strand, chrom_part
from .ranges import Range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Run:
    """A contiguous span of alignment columns: [start, start + length)."""
    start: int
    length: int

    @property
    def end(self):
        return self.start + self.length


def filtered_columns(ref_entry, ranges):
    """
    Find the runs of reference columns covered by ranges.

    A column belongs to a run when the reference has a base there and its
    position is covered by the current range. A reference gap, or a position
    between two ranges, ends the run.

    Only one range starting before the reference start is considered, the
    last one in sorted order. If a shorter range is nested inside a longer
    one that starts earlier, the longer range is not seen and the columns it
    covers are dropped. With [0, 9999999) and [10, 20) on chr1, a block at
    chr1:4432333 yields no runs.

    The reference position advances on every non-gap character, ambiguity
    codes included. Coverage counting advances only on ACGTN (see
    is_aligned_base), so the two can disagree for references holding IUPAC
    codes.

    Args:
        ref_entry (AlignedEntry): Positive-strand reference entry
        ranges (RangeIndex): Regions to keep, keyed by chromosome without genome prefix

    Returns:
        list of Run

    Raises:
        UnsupportedStrandError: If the reference is on the negative strand
    """
    if ref_entry.strand is not Strand.POSITIVE:
        raise UnsupportedStrandError(
            f"Column filtering needs a positive-strand reference, got {ref_entry.seq} "
            f"on {ref_entry.strand.char}")

    chrom = chrom_part(ref_entry.seq)
    ref_end = ref_entry.start + ref_entry.aligned_length
    relevant_ranges = ranges.overlapping_ranges(Range(chrom, ref_entry.start, ref_end))
    current_range = next(relevant_ranges, None)
    current_pos = ref_entry.start
    runs = []
    was_within_run = False

    for column, base in enumerate(ref_entry.alignment):
        while current_range is not None and current_range.precedes(chrom, current_pos):
            current_range = next(relevant_ranges, None)
        if current_range is None or current_range.succeeds(chrom, ref_end):
            break

        within_run = False
        if base != GAP:
            if current_range.overlaps(chrom, current_pos):
                if was_within_run:
                    runs[-1] = Run(runs[-1].start, runs[-1].length + 1)
                else:
                    runs.append(Run(column, 1))
                within_run = True
            current_pos += 1
        was_within_run = within_run

    return runs


def filter_entry_columns(entry, run):
    """
    Project one aligned entry onto a run of columns.

    The new start skips the entry's bases before the run, plus any gap
    columns at the start of the run. Context and qualities are dropped.

    Example:
        >>> entry = AlignedEntry('Gallus_gallus.chr1', 4432333, 5, Strand.POSITIVE, 157682039, 'CAGT-A')
        >>> sub = filter_entry_columns(entry, Run(2, 3))
        >>> sub.alignment, sub.start, sub.aligned_length
        ('GT-', 4432335, 2)
    """
    before = entry.alignment[:run.start]
    inside = entry.alignment[run.start:run.end]
    before_range_offset = len(before) - before.count(GAP)
    inside_range_offset = len(inside) - len(inside.lstrip(GAP))
    return AlignedEntry(
        seq=entry.seq,
        start=entry.start + before_range_offset + inside_range_offset,
        aligned_length=len(inside) - inside.count(GAP),
        strand=entry.strand,
        sequence_size=entry.sequence_size,
        alignment=inside,
    )


def filter_block_columns(block, run):
    """Cut every aligned entry of block down to run. Unaligned entries are dropped."""
    return block.copy(entries=[filter_entry_columns(e, run) for e in block.aligned_entries()])


def filter_block(block, ranges):
    """
    Split a block into the sub-blocks covered by ranges.

    Returns:
        list of Block (empty if nothing is covered or the block has no aligned entries)
    """
    ref_entry = next(block.aligned_entries(), None)
    if ref_entry is None:
        return []
    block.alignment_width()  # raises on ragged blocks
    runs = filtered_columns(ref_entry, ranges)
    logger.debug(f"{ref_entry.seq}:{ref_entry.start} split into {len(runs)} runs")
    return [filter_block_columns(block, run) for run in runs]
