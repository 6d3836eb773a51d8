#!/usr/bin/env python3
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

Column-level analyses of MAF (Multiple Alignment Format) files

This package parses and writes MAF alignment blocks and provides three
column-wise analyses over them: coverage of a reference genome by every
other genome, merging of duplicate entries from one genome within a block,
and extraction of the columns that fall inside BED regions.

Example:
    >>> import io
    >>> from maf_columns import iter_items, merge_duplicates, format_item, MergeParams, ConsensusMode
    >>> maf = io.StringIO("a\\ns hg38.chr1 10 3 + 1000 ACG\\ns mm10.chr2 5 3 + 900 ACG\\n"
    ...                   "s mm10.chr7 8 3 + 900 ATG\\n")
    >>> block = next(iter_items(maf))
    >>> print(format_item(merge_duplicates(block, MergeParams(ConsensusMode.UNANIMITY))), end='')
    a
    s hg38.chr1 10 3 + 1000 ACG
    s mm10.chr2 5 3 + 900 ANG
    <BLANKLINE>
"""

__version__ = '0.1.0'

from .errors import (
    BedParseError,
    FieldParseError,
    InconsistentBlockError,
    MAFError,
    MAFIOError,
    MAFParseError,
    MalformedMetadataError,
    PrematureEndError,
    UnexpectedLineError,
    UnrecognizedLineKindError,
    UnsupportedBedError,
    UnsupportedLineKindError,
    UnsupportedStrandError,
)
from .model import (
    GAP,
    AlignedContext,
    AlignedContextStatus,
    AlignedEntry,
    Block,
    Comment,
    Strand,
    UnalignedContextStatus,
    UnalignedEntry,
    chrom_part,
    genome_name,
)
from .parser import iter_items, metadata_from_header, next_block, next_item, parse_block
from .output import format_block, format_comment, format_item, write_item
from .ranges import Range, RangeIndex, parse_bed
from .coverage import (
    ALIGNED_BASES,
    REPORT_HEADER,
    CoverageAccumulator,
    CoverageParams,
    CoverageRecord,
    is_aligned_base,
    write_coverage_report,
)
from .consensus import (
    DEFAULT_MERGE_PARAMS,
    BaseCounts,
    ConsensusMode,
    MergeParams,
    consensus_base,
    duplicate_entries,
    get_base_counts,
    has_duplicates,
    merge_duplicates,
    unanimous_base,
)
from .filter import Run, filter_block, filter_block_columns, filter_entry_columns, filtered_columns
from .commands import (
    output_coverage,
    output_dup_blocks,
    output_filtered_blocks,
    output_merged_consensus_blocks,
)
