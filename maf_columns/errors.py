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

Exception types raised by maf_columns.

Every failure on malformed input is reported as a subclass of MAFError.
Parse failures are also ValueErrors so callers that only care about
"bad data" can catch that.
"""


class MAFError(Exception):
    """Base class for all maf_columns errors."""


class MAFIOError(MAFError):
    """Reading the input stream failed. The OSError is chained as __cause__."""


class MAFParseError(MAFError, ValueError):
    """The input is not valid MAF."""

    def __init__(self, message, line=None):
        self.line = line
        if line is not None:
            message = f"{message}: {line!r}"
        super().__init__(message)


class UnexpectedLineError(MAFParseError):
    """A line appeared where it is not allowed."""


class MalformedMetadataError(MAFParseError):
    """A block header token is not of the form key=value."""


class UnrecognizedLineKindError(MAFParseError):
    """A block body line starts with an unknown line kind."""


class UnsupportedLineKindError(MAFParseError):
    """A block body line kind that is valid MAF but not supported ("q")."""


class FieldParseError(MAFParseError):
    """A field is missing or cannot be decoded."""

    def __init__(self, field, message, line=None):
        self.field = field
        super().__init__(f"{message} ({field})", line)


class PrematureEndError(MAFParseError):
    """Input ended before the expected block was found."""


class BedParseError(MAFError, ValueError):
    """A BED line could not be parsed."""


class UnsupportedBedError(BedParseError):
    """BED input with more than 9 fields (BED12) is not supported."""


class UnsupportedStrandError(MAFError, ValueError):
    """An operation needs a positive-strand reference entry."""


class InconsistentBlockError(MAFError, ValueError):
    """Aligned entries within one block have different widths."""
