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

Per-genome coverage of a reference genome across MAF blocks.

For every aligned reference base, each genome in the block gains one base of
coverage if at least one of its entries is aligned in that column. Duplicate
entries of one genome therefore count once per column, not once each.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .model import Strand, chrom_part
from .ranges import RangeIndex

logger = logging.getLogger(__name__)

# Characters counted as an aligned base; everything else is treated as a gap
ALIGNED_BASES = frozenset('ACGTNacgtn')

REPORT_HEADER = ("# referenceSpecies/Chr\tquerySpecies/Chr\tlengthOfReference\t"
                 "percentCoverage\tbasesCoverage")


def is_aligned_base(base):
    """
    True for A, C, G, T or N in either case.

    Coverage advances the reference offset only on these characters. The
    column filter advances on any non-gap character, so a reference carrying
    ambiguity codes such as R or Y maps later columns to different positions
    in the two analyses.
    """
    return base in ALIGNED_BASES


@dataclass(frozen=True)
class CoverageParams:
    """
    Parameters for coverage counting.

    Attributes:
        ref_genome: Genome name (the part of the sequence id before the first '.')
                    whose entries provide the coordinate basis
        ranges: Optional RangeIndex; reference bases outside it are ignored
    """
    ref_genome: str
    ranges: Optional[RangeIndex] = None

    def __post_init__(self):
        if not self.ref_genome:
            raise ValueError("ref_genome must be a non-empty genome name")
        if '.' in self.ref_genome:
            raise ValueError(
                f"ref_genome must be a genome name without a sequence part, got {self.ref_genome!r}")
        if self.ranges is not None and not isinstance(self.ranges, RangeIndex):
            raise ValueError(f"ranges must be a RangeIndex, got {type(self.ranges).__name__}")


@dataclass(frozen=True)
class CoverageRecord:
    """One row of the coverage report.

    Fields:
        ref_genome: Reference genome name
        genome: Genome whose coverage is reported
        total: Reference length used as the denominator
        fraction: coverage / total (0.0 when total is 0)
        coverage: Number of reference bases covered by genome
    """
    ref_genome: str
    genome: str
    total: int
    fraction: float
    coverage: int


class CoverageAccumulator:
    """Accumulates coverage over a stream of blocks for one reference genome."""

    def __init__(self, params):
        self.params = params
        self.coverage = {}       # genome -> covered reference bases
        self.ref_lengths = {}    # reference seq -> sequence_size, for the unfiltered total
        self.blocks_seen = 0

    @property
    def ref_genome(self):
        return self.params.ref_genome

    def in_range(self, chrom, position):
        """True if no ranges are configured or the position is inside one."""
        ranges = self.params.ranges
        if ranges is None:
            return True
        return ranges.contains_point(chrom, position)

    def add_block(self, block):
        """Add one block's coverage."""
        self.blocks_seen += 1
        block.alignment_width()  # raises on ragged blocks
        entries = block.entries_by_genome()
        for ref_entry in entries.get(self.ref_genome, ()):
            self._add_ref_entry(ref_entry, entries)

    def _add_ref_entry(self, ref_entry, entries):
        chrom = chrom_part(ref_entry.seq)
        # Offset within the reference sequence, not within the block
        ref_offset = 0
        for column, base in enumerate(ref_entry.alignment):
            if not is_aligned_base(base):
                continue
            if ref_entry.strand is Strand.POSITIVE:
                ref_pos = ref_entry.start + ref_offset
            else:
                ref_pos = ref_entry.sequence_size - ref_entry.start - ref_offset
            ref_offset += 1
            if not self.in_range(chrom, ref_pos):
                continue
            for genome, genome_entries in entries.items():
                if any(is_aligned_base(e.alignment[column]) for e in genome_entries):
                    self.coverage[genome] = self.coverage.get(genome, 0) + 1

        if ref_entry.seq not in self.ref_lengths:
            self.ref_lengths[ref_entry.seq] = ref_entry.sequence_size

    def total(self):
        """Reference length: summed range widths if filtering, else summed sequence sizes."""
        if self.params.ranges is None:
            return sum(self.ref_lengths.values())
        return self.params.ranges.total_width()

    def report(self):
        """
        Coverage records for every genome with nonzero coverage, sorted by genome.

        Returns:
            list of CoverageRecord
        """
        total = self.total()
        records = []
        for genome in sorted(self.coverage):
            covered = self.coverage[genome]
            if covered <= 0:
                continue
            records.append(CoverageRecord(
                ref_genome=self.ref_genome,
                genome=genome,
                total=total,
                fraction=covered / total if total > 0 else 0.0,
                coverage=covered,
            ))
        logger.info(f"Coverage of {self.ref_genome}: {len(records)} genomes over "
                    f"{self.blocks_seen} blocks, reference length {total}")
        return records


def write_coverage_report(output, records):
    """Write coverage records as a tab-separated table with a header line."""
    output.write(REPORT_HEADER + '\n')
    for record in records:
        output.write(f"{record.ref_genome}\t{record.genome}\t{record.total}\t"
                     f"{record.fraction}\t{record.coverage}\n")
