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

Merging of duplicate entries from one genome within a block.

Whole-genome aligners can place several copies of one species' sequence in a
single block. Each such group is collapsed into one entry whose bases are
called column by column according to a ConsensusMode.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from .model import AlignedEntry

logger = logging.getLogger(__name__)

NUCLEOTIDES = 'ACGT'


class ConsensusMode(Enum):
    """How a merged entry's base is called in each column."""
    UNANIMITY = 'unanimity'    # keep the base only if every duplicate agrees, else N
    CONSENSUS = 'consensus'    # majority within the species, ties broken by the whole column
    MASK = 'mask'              # every base of a duplicated species becomes N


@dataclass(frozen=True)
class MergeParams:
    """
    Parameters for duplicate merging.

    Attributes:
        mode: ConsensusMode used to call merged bases
        unresolved_base: Base written when a column cannot be resolved
    """
    mode: ConsensusMode = ConsensusMode.CONSENSUS
    unresolved_base: str = 'N'

    def __post_init__(self):
        if not isinstance(self.mode, ConsensusMode):
            raise ValueError(f"mode must be a ConsensusMode, got {self.mode!r}")
        if not isinstance(self.unresolved_base, str) or len(self.unresolved_base) != 1:
            raise ValueError(
                f"unresolved_base must be a single character, got: {self.unresolved_base!r}")


DEFAULT_MERGE_PARAMS = MergeParams()


@dataclass(frozen=True)
class BaseCounts:
    """Counts of A, C, G and T (any case) in one alignment column."""
    a: int = 0
    c: int = 0
    g: int = 0
    t: int = 0

    def as_dict(self):
        return {'A': self.a, 'C': self.c, 'G': self.g, 'T': self.t}


def get_base_counts(entries):
    """
    Tally the bases in each column of a group of aligned entries.

    Args:
        entries: Non-empty sequence of AlignedEntry of equal width

    Returns:
        list of BaseCounts, one per column
    """
    columns = zip(*(entry.alignment.upper() for entry in entries))
    return [
        BaseCounts(a=col.count('A'), c=col.count('C'), g=col.count('G'), t=col.count('T'))
        for col in columns
    ]


def _max_among(counts, candidates):
    """Subset of candidates with the highest count."""
    tally = counts.as_dict()
    best = max(tally[base] for base in candidates)
    return [base for base in candidates if tally[base] == best]


def unanimous_base(counts, unresolved='N'):
    """
    The single base present in the column, or N if there is more than one (or none).

    Examples:
        >>> unanimous_base(BaseCounts(c=10))
        'C'
        >>> unanimous_base(BaseCounts(a=9, t=1))
        'N'
    """
    present = [base for base, n in counts.as_dict().items() if n > 0]
    return present[0] if len(present) == 1 else unresolved


def consensus_base(counts, tie_breaker, unresolved='N'):
    """
    Most frequent base in counts, using tie_breaker counts to resolve ties.

    If bases are still tied after the tie breaker, the column is unresolved.

    Args:
        counts (BaseCounts): Counts within the duplicated species
        tie_breaker (BaseCounts): Counts across the whole block column

    Examples:
        >>> consensus_base(BaseCounts(4, 4, 5, 5), BaseCounts(1, 1, 2, 1))
        'G'
        >>> consensus_base(BaseCounts(4, 5, 4, 5), BaseCounts(1, 2, 1, 2))
        'N'
    """
    survivors = _max_among(counts, NUCLEOTIDES)
    if len(survivors) > 1:
        survivors = _max_among(tie_breaker, survivors)
    return survivors[0] if len(survivors) == 1 else unresolved


def duplicate_entries(block):
    """
    Aligned entries of genomes that appear more than once in the block.

    Returns:
        dict: genome -> list of AlignedEntry, in order of first appearance
    """
    return {genome: entries for genome, entries in block.entries_by_genome().items()
            if len(entries) > 1}


def has_duplicates(block):
    """True if any genome has more than one aligned entry in the block."""
    seen = set()
    for entry in block.aligned_entries():
        if entry.genome in seen:
            return True
        seen.add(entry.genome)
    return False


def _merge_group(entries, block_counts, params):
    """Collapse one genome's duplicate entries into a single entry."""
    unresolved = params.unresolved_base
    width = len(entries[0].alignment)
    if params.mode is ConsensusMode.MASK:
        bases = unresolved * width
    elif params.mode is ConsensusMode.UNANIMITY:
        bases = ''.join(unanimous_base(c, unresolved) for c in get_base_counts(entries))
    elif params.mode is ConsensusMode.CONSENSUS:
        bases = ''.join(consensus_base(c, tie, unresolved)
                        for c, tie in zip(get_base_counts(entries), block_counts))
    else:
        raise ValueError(f"Unknown consensus mode: {params.mode!r}")
    # Coordinates come from the first duplicate, even when the duplicates disagree
    return replace(entries[0], alignment=bases)


def merge_duplicates(block, params=None):
    """
    Replace each duplicated genome's entries with one merged entry.

    Entries of non-duplicated genomes, and unaligned entries, keep their
    order; the merged entries follow them in order of each genome's first
    appearance.

    Args:
        block (Block): Block to merge
        params (MergeParams, optional): Defaults to DEFAULT_MERGE_PARAMS

    Returns:
        Block: A new block; the input block is not modified
    """
    if params is None:
        params = DEFAULT_MERGE_PARAMS

    block.alignment_width()  # raises on ragged blocks
    duplicates = duplicate_entries(block)
    if not duplicates:
        return block.copy()

    block_counts = get_base_counts(list(block.aligned_entries()))
    duplicated = {id(entry) for group in duplicates.values() for entry in group}
    kept = [entry for entry in block.entries
            if not (isinstance(entry, AlignedEntry) and id(entry) in duplicated)]
    merged = [_merge_group(group, block_counts, params) for group in duplicates.values()]
    logger.debug(f"Merged duplicates of {', '.join(duplicates)} ({params.mode.value})")
    return block.copy(entries=kept + merged)
