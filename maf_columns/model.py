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

Block data model for Multiple Alignment Format (MAF) files.

A MAF file is a sequence of items: free-text comments and alignment blocks.
Each block holds an ordered list of entries, either aligned ("s" lines, with
an optional "i" context line) or unaligned ("e" lines, gaps bridged by a
chain), plus the key=value metadata from its "a" header line.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional

from .errors import InconsistentBlockError


GAP = '-'


class Strand(Enum):
    """Orientation of a sequence relative to its source assembly."""
    POSITIVE = '+'
    NEGATIVE = '-'

    @classmethod
    def from_char(cls, char):
        """Decode '+' or '-'. Raises ValueError for anything else."""
        return cls(char)

    @property
    def char(self):
        return self.value


class AlignedContextStatus(Enum):
    """Status characters used on "i" lines (aligned entries)."""
    CONTIGUOUS = 'C'                  # sequence before/after is contiguous with this block
    INSERTION = 'I'                   # bases between this block and the one before/after
    FIRST_IN_SEQUENCE = 'N'           # first sequence from this chrom or scaffold
    FIRST_IN_SEQUENCE_BRIDGED = 'n'   # as N, but bridged by an alignment from another chrom
    MISSING_DATA = 'M'                # missing data (Ns) before or after this block
    ALREADY_USED = 'T'                # sequence already used in a previous block (tandem dup)


class UnalignedContextStatus(Enum):
    """Status characters used on "e" lines (unaligned entries).

    Note that 'C' means Deletion here, not Contiguous as on "i" lines.
    """
    DELETION = 'C'        # region deleted in the source or inserted in the reference
    INSERTION = 'I'       # non-aligning bases in the source between chained blocks
    MISSING_DATA = 'M'    # non-aligning bases, more than 90% of them Ns
    NEW_SEQUENCE = 'n'    # next aligning block starts in a new chrom bridged by a chain
    ALREADY_USED = 'T'    # emitted by MULTIZ although the format docs do not list it


@dataclass
class AlignedContext:
    """Context from an "i" line: what adjoins an aligned entry on each side."""
    left_status: AlignedContextStatus
    left_count: int
    right_status: AlignedContextStatus
    right_count: int


@dataclass
class AlignedEntry:
    """An "s" line, plus its "i" line if one followed it.

    Fields:
        seq: Composite sequence id, "genome.chrom..."
        start: Zero-based start of the aligned region, relative to strand
        aligned_length: Number of non-gap bases in the alignment
        strand: Strand the aligned sequence is on
        sequence_size: Full length of the named sequence
        alignment: Bases including gap characters ('-')
        context: Optional AlignedContext from a following "i" line
        qualities: Per-base quality scores ("q" lines are not parsed, so this stays None)
    """
    seq: str
    start: int
    aligned_length: int
    strand: Strand
    sequence_size: int
    alignment: str
    context: Optional[AlignedContext] = None
    qualities: Optional[List[int]] = None

    @property
    def genome(self):
        return genome_name(self.seq)


@dataclass
class UnalignedEntry:
    """An "e" line: a region bridged by a chain but not aligned in this block."""
    seq: str
    start: int
    size: int
    strand: Strand
    sequence_size: int
    status: UnalignedContextStatus

    @property
    def genome(self):
        return genome_name(self.seq)


@dataclass
class Block:
    """One alignment block ("paragraph") of a MAF file."""
    entries: List[object] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    def aligned_entries(self):
        """Yield the aligned entries in block order."""
        for entry in self.entries:
            if isinstance(entry, AlignedEntry):
                yield entry

    def entries_by_genome(self):
        """
        Group aligned entries by genome name.

        Returns:
            dict: genome -> list of AlignedEntry, in order of first appearance
        """
        groups = {}
        for entry in self.aligned_entries():
            groups.setdefault(entry.genome, []).append(entry)
        return groups

    def alignment_width(self):
        """
        Number of columns in the block.

        Returns 0 for a block without aligned entries.

        Raises:
            InconsistentBlockError: If aligned entries differ in width
        """
        widths = {len(entry.alignment) for entry in self.aligned_entries()}
        if len(widths) > 1:
            raise InconsistentBlockError(
                f"Aligned entries have different widths: {sorted(widths)}")
        return widths.pop() if widths else 0

    def copy(self, entries=None):
        """Shallow copy with fresh containers, optionally with new entries."""
        return replace(
            self,
            entries=list(self.entries if entries is None else entries),
            metadata=dict(self.metadata),
        )


@dataclass
class Comment:
    """A "#" line, with one leading '#' stripped."""
    text: str


def genome_name(seq):
    """Get "genome" from "genome.chr.name"."""
    return seq.split('.', 1)[0]


def chrom_part(seq):
    """
    Get "chr.name" from "genome.chr.name".

    Returns an empty string when the id has no genome prefix.

    Examples:
        >>> chrom_part('hg38.chr1')
        'chr1'
        >>> chrom_part('Fregata_magnificens.C5769372__2.0')
        'C5769372__2.0'
    """
    parts = seq.split('.', 1)
    return parts[1] if len(parts) > 1 else ''
