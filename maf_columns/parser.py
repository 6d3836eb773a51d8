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

Streaming MAF parser.

Items are read one at a time from an iterator of text lines, so arbitrarily
large files can be processed without holding more than one block in memory.

Example:
    >>> import io
    >>> text = "##maf version=1\\na score=2\\ns hg16.chr7 27707221 3 + 158545518 gca\\n"
    >>> [type(item).__name__ for item in iter_items(io.StringIO(text))]
    ['Comment', 'Block']
"""

import logging

from .errors import (
    FieldParseError,
    MAFIOError,
    MalformedMetadataError,
    PrematureEndError,
    UnexpectedLineError,
    UnrecognizedLineKindError,
    UnsupportedLineKindError,
)
from .model import (
    AlignedContext,
    AlignedContextStatus,
    AlignedEntry,
    Block,
    Comment,
    Strand,
    UnalignedContextStatus,
    UnalignedEntry,
)

logger = logging.getLogger(__name__)

# Field names after the line kind token, in file order
S_LINE_FIELDS = ('seq', 'start', 'aligned_length', 'strand', 'sequence_size', 'alignment')
I_LINE_FIELDS = ('seq', 'left_status', 'left_count', 'right_status', 'right_count')
E_LINE_FIELDS = ('seq', 'start', 'size', 'strand', 'sequence_size', 'status')


def _read_lines(lines):
    """Yield lines with the trailing newline removed, wrapping read failures."""
    while True:
        try:
            line = next(lines)
        except StopIteration:
            return
        except OSError as err:
            raise MAFIOError(f"Failed to read MAF input: {err}") from err
        yield line.rstrip('\r\n')


def _is_blank(line):
    return not line.strip()


def next_item(stream):
    """
    Read the next item (comment or block) from a MAF stream.

    Blank lines between items are skipped. A block runs from its "a" header
    line through the next blank line or the end of input.

    Args:
        stream: Iterator of text lines, e.g. an open file or io.StringIO.
                A list must be wrapped with iter() so that successive calls
                continue where the previous one stopped.

    Returns:
        Block or Comment, or None at end of input

    Raises:
        MAFIOError: If reading the stream fails
        MAFParseError: If the input is malformed
    """
    lines = _read_lines(iter(stream))
    for line in lines:
        if _is_blank(line):
            continue
        if line.startswith('#'):
            return Comment(line[1:])
        if line.startswith('a'):
            return parse_block(line, lines)
        raise UnexpectedLineError("Expected a comment or an 'a' line", line)
    return None


def iter_items(stream):
    """
    Yield every item in a MAF stream, in file order.

    Parse errors are raised to the caller rather than ending iteration, so a
    malformed line is never mistaken for the end of the file.
    """
    lines = iter(stream)
    count = 0
    while True:
        item = next_item(lines)
        if item is None:
            break
        count += 1
        yield item
    logger.debug(f"Read {count} MAF items")


def next_block(stream):
    """
    Read the next block, skipping any comments before it.

    Raises:
        PrematureEndError: If the input ends before a block is found
    """
    lines = iter(stream)
    while True:
        item = next_item(lines)
        if item is None:
            raise PrematureEndError("Input ended before any block was found")
        if isinstance(item, Block):
            return item


def metadata_from_header(header):
    """
    Parse block metadata from a header line like "a key1=value1 key2=value2".

    Everything after the first '=' is the value.

    Returns:
        dict: key -> value (empty for a bare "a")

    Raises:
        MalformedMetadataError: If a token has no '='
    """
    metadata = {}
    for token in header.split()[1:]:
        key, sep, value = token.partition('=')
        if not sep:
            raise MalformedMetadataError(f"Metadata token {token!r} is not key=value", header)
        metadata[key] = value
    return metadata


def _named_fields(fields, names, line):
    """Map the fields after the line kind token onto names."""
    values = fields[1:]
    if len(values) < len(names):
        missing = names[len(values)]
        raise FieldParseError(missing, f"'{fields[0]}' line is incomplete", line)
    return dict(zip(names, values))


def _parse_count(value, field, line):
    try:
        number = int(value)
    except ValueError:
        number = -1
    if number < 0 or not value.isdigit():
        raise FieldParseError(field, f"Expected a non-negative integer, got {value!r}", line)
    return number


def _parse_strand(value, line):
    try:
        return Strand.from_char(value)
    except ValueError:
        raise FieldParseError('strand', f"Strand must be '+' or '-', got {value!r}", line) from None


def _parse_status(vocabulary, value, field, line):
    try:
        return vocabulary(value)
    except ValueError:
        raise FieldParseError(field, f"Invalid {vocabulary.__name__} {value!r}", line) from None


def _parse_s_line(fields, line):
    values = _named_fields(fields, S_LINE_FIELDS, line)
    return AlignedEntry(
        seq=values['seq'],
        start=_parse_count(values['start'], 'start', line),
        aligned_length=_parse_count(values['aligned_length'], 'aligned_length', line),
        strand=_parse_strand(values['strand'], line),
        sequence_size=_parse_count(values['sequence_size'], 'sequence_size', line),
        alignment=values['alignment'],
    )


def _parse_i_line(fields, line):
    values = _named_fields(fields, I_LINE_FIELDS, line)
    context = AlignedContext(
        left_status=_parse_status(AlignedContextStatus, values['left_status'], 'left_status', line),
        left_count=_parse_count(values['left_count'], 'left_count', line),
        right_status=_parse_status(AlignedContextStatus, values['right_status'], 'right_status', line),
        right_count=_parse_count(values['right_count'], 'right_count', line),
    )
    return values['seq'], context


def _parse_e_line(fields, line):
    values = _named_fields(fields, E_LINE_FIELDS, line)
    return UnalignedEntry(
        seq=values['seq'],
        start=_parse_count(values['start'], 'start', line),
        size=_parse_count(values['size'], 'size', line),
        strand=_parse_strand(values['strand'], line),
        sequence_size=_parse_count(values['sequence_size'], 'sequence_size', line),
        status=_parse_status(UnalignedContextStatus, values['status'], 'status', line),
    )


def parse_block(header, lines):
    """
    Parse one block given its header line and the lines that follow it.

    Consumes lines up to and including the blank line that ends the block;
    anything after it is left in the iterator.

    Args:
        header (str): The "a" line
        lines: Iterable of the following lines

    Returns:
        Block
    """
    metadata = metadata_from_header(header)
    entries = []
    last_aligned = None  # index into entries of the entry an "i" line may attach to

    for line in lines:
        line = line.rstrip('\r\n')
        if _is_blank(line):
            break
        fields = line.split()
        kind = fields[0]
        if kind == 's':
            entries.append(_parse_s_line(fields, line))
            last_aligned = len(entries) - 1
        elif kind == 'i':
            seq, context = _parse_i_line(fields, line)
            if not entries:
                raise UnexpectedLineError("'i' line cannot be first in block", line)
            if last_aligned is None or entries[last_aligned].seq != seq:
                raise UnexpectedLineError("'i' line must follow a corresponding 's' line", line)
            entries[last_aligned].context = context
        elif kind == 'e':
            entries.append(_parse_e_line(fields, line))
            last_aligned = None
        elif kind == 'q':
            raise UnsupportedLineKindError("Quality ('q') lines are not supported", line)
        else:
            raise UnrecognizedLineKindError(f"Unrecognized line kind {kind!r}", line)

    return Block(entries=entries, metadata=metadata)
