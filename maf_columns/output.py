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

Rendering of MAF items back to text.

The layout is the exact inverse of the parser: single-space separated
fields, metadata keys in sorted order, and a blank line after each block.
"""

from .model import AlignedEntry, Block, Comment, UnalignedEntry


def format_aligned_entry(entry):
    """Render an "s" line, followed by an "i" line if the entry has context."""
    text = (f"s {entry.seq} {entry.start} {entry.aligned_length} "
            f"{entry.strand.char} {entry.sequence_size} {entry.alignment}\n")
    context = entry.context
    if context is not None:
        text += (f"i {entry.seq} {context.left_status.value} {context.left_count} "
                 f"{context.right_status.value} {context.right_count}\n")
    return text


def format_unaligned_entry(entry):
    """Render an "e" line."""
    return (f"e {entry.seq} {entry.start} {entry.size} {entry.strand.char} "
            f"{entry.sequence_size} {entry.status.value}\n")


def format_block(block):
    """
    Render a block as MAF text, terminated by a blank line.

    Example:
        >>> from maf_columns.parser import parse_block
        >>> block = parse_block("a pass=2 score=10", ["s hg16.chr7 27707221 3 + 158545518 gca"])
        >>> print(format_block(block), end='')
        a pass=2 score=10
        s hg16.chr7 27707221 3 + 158545518 gca
        <BLANKLINE>
    """
    parts = ['a']
    for key in sorted(block.metadata):
        parts.append(f" {key}={block.metadata[key]}")
    parts.append('\n')
    for entry in block.entries:
        if isinstance(entry, AlignedEntry):
            parts.append(format_aligned_entry(entry))
        elif isinstance(entry, UnalignedEntry):
            parts.append(format_unaligned_entry(entry))
        else:
            raise TypeError(f"Unknown block entry type: {type(entry).__name__}")
    parts.append('\n')
    return ''.join(parts)


def format_comment(text):
    return f"#{text}\n"


def format_item(item):
    """Render a Block or Comment."""
    if isinstance(item, Block):
        return format_block(item)
    elif isinstance(item, Comment):
        return format_comment(item.text)
    raise TypeError(f"Unknown MAF item type: {type(item).__name__}")


def write_item(output, item):
    """Write a Block or Comment to a text stream."""
    output.write(format_item(item))
