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

Streaming drivers that connect the parser, one analysis and the writer.

Each driver reads items from an input text stream in file order, passes
comments through where the output is MAF, and lets any parse error propagate
to the caller instead of stopping quietly at the first bad line.
"""

import logging

from .consensus import DEFAULT_MERGE_PARAMS, has_duplicates, merge_duplicates
from .coverage import CoverageAccumulator, write_coverage_report
from .filter import filter_block
from .model import Block, Comment
from .output import write_item
from .parser import iter_items

logger = logging.getLogger(__name__)


def output_dup_blocks(input_stream, output):
    """
    Write only the blocks that contain duplicate entries of some genome.

    Returns:
        int: Number of blocks written
    """
    seen = written = 0
    for item in iter_items(input_stream):
        if isinstance(item, Comment):
            write_item(output, item)
            continue
        seen += 1
        if has_duplicates(item):
            write_item(output, item)
            written += 1
    logger.info(f"{written} of {seen} blocks contain duplicates")
    return written


def output_merged_consensus_blocks(input_stream, output, params=None):
    """
    Write every block with duplicate entries merged.

    Returns:
        int: Number of blocks written
    """
    if params is None:
        params = DEFAULT_MERGE_PARAMS
    written = 0
    for item in iter_items(input_stream):
        if isinstance(item, Block):
            item = merge_duplicates(item, params)
            written += 1
        write_item(output, item)
    logger.info(f"Wrote {written} merged blocks ({params.mode.value})")
    return written


def output_filtered_blocks(input_stream, output, ranges):
    """
    Write the sub-blocks of every block that fall inside ranges.

    Returns:
        int: Number of sub-blocks written
    """
    seen = written = 0
    for item in iter_items(input_stream):
        if isinstance(item, Comment):
            write_item(output, item)
            continue
        seen += 1
        for sub_block in filter_block(item, ranges):
            write_item(output, sub_block)
            written += 1
    logger.info(f"Filtered {seen} blocks into {written} sub-blocks")
    return written


def output_coverage(input_stream, output, params):
    """
    Compute coverage of params.ref_genome and write the report.

    Returns:
        list of CoverageRecord
    """
    accumulator = CoverageAccumulator(params)
    for item in iter_items(input_stream):
        if isinstance(item, Block):
            accumulator.add_block(item)
    records = accumulator.report()
    write_coverage_report(output, records)
    return records
