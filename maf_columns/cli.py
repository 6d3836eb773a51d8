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

Command line interface.

Usage:
    maf-columns [-i INPUT] [-o OUTPUT] dup_blocks
    maf-columns [-i INPUT] [-o OUTPUT] merge_dups {unanimity,consensus,mask}
    maf-columns [-i INPUT] [-o OUTPUT] coverage REF_GENOME [--bed BED]
    maf-columns [-i INPUT] [-o OUTPUT] filter BED

Input defaults to stdin and output to stdout.
"""

import argparse
import logging
import sys

from . import __version__
from .commands import (
    output_coverage,
    output_dup_blocks,
    output_filtered_blocks,
    output_merged_consensus_blocks,
)
from .consensus import ConsensusMode, MergeParams
from .coverage import CoverageParams
from .errors import MAFError
from .ranges import parse_bed

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='maf-columns',
        description='Column-level analyses of MAF multiple alignments.')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-i', '--input', default='-',
                        help='Input MAF file (default: stdin)')
    parser.add_argument('-o', '--output', default='-',
                        help='Output file (default: stdout)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log progress summaries')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('dup_blocks', help='Output only blocks with duplicated genomes')

    merge = subparsers.add_parser('merge_dups', help='Merge duplicate entries of each genome')
    merge.add_argument('mode', choices=[m.value for m in ConsensusMode],
                       help='How merged bases are called')

    coverage = subparsers.add_parser('coverage', help='Per-genome coverage of a reference genome')
    coverage.add_argument('ref_genome', help='Reference genome name (sequence id prefix)')
    coverage.add_argument('--bed', help='Only count reference bases inside these BED3 regions')

    column_filter = subparsers.add_parser('filter', help='Keep only columns inside BED3 regions')
    column_filter.add_argument('bed', help='BED3 regions on the first sequence of each block')

    return parser


def configure_logging(verbose=False, debug=False):
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _open_input(path):
    return sys.stdin if path == '-' else open(path, 'r')


def _open_output(path):
    return sys.stdout if path == '-' else open(path, 'w')


def load_ranges(path):
    with open(path, 'r') as fh:
        return parse_bed(fh)


def run(args, input_stream, output):
    """Dispatch parsed arguments to a driver."""
    if args.command == 'dup_blocks':
        output_dup_blocks(input_stream, output)
    elif args.command == 'merge_dups':
        output_merged_consensus_blocks(input_stream, output, MergeParams(mode=ConsensusMode(args.mode)))
    elif args.command == 'coverage':
        ranges = load_ranges(args.bed) if args.bed else None
        output_coverage(input_stream, output, CoverageParams(args.ref_genome, ranges))
    elif args.command == 'filter':
        output_filtered_blocks(input_stream, output, load_ranges(args.bed))
    else:
        raise ValueError(f"Unknown command: {args.command}")


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.debug)

    input_stream = output = None
    try:
        input_stream = _open_input(args.input)
        output = _open_output(args.output)
        run(args, input_stream, output)
    except (MAFError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        logger.debug("Error details", exc_info=True)
        return 1
    finally:
        if input_stream is not None and input_stream is not sys.stdin:
            input_stream.close()
        if output is not None and output is not sys.stdout:
            output.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
