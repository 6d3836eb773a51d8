#!/usr/bin/env python3
"""
Tests for the streaming drivers and the command line interface.
"""

import io
import logging

import pytest
from maf_columns import (
    REPORT_HEADER,
    ConsensusMode,
    CoverageParams,
    MergeParams,
    Range,
    RangeIndex,
    UnrecognizedLineKindError,
    output_coverage,
    output_dup_blocks,
    output_filtered_blocks,
    output_merged_consensus_blocks,
)
from maf_columns.cli import build_parser, main


MAF = """##maf version=1
a score=1
s hg38.chr1 0 4 + 100 ACGT
s mm10.chr2 10 4 + 200 ACGA
s mm10.chr5 20 4 - 300 ACTA

a score=2
s hg38.chr1 4 3 + 100 T-TG
s rn6.chr3 0 4 + 50 TATG

"""

DUP_BLOCK = """a score=1
s hg38.chr1 0 4 + 100 ACGT
s mm10.chr2 10 4 + 200 ACGA
s mm10.chr5 20 4 - 300 ACTA

"""


class TestDrivers:
    """Test the stream-to-stream drivers."""

    def test_output_dup_blocks(self):
        output = io.StringIO()
        assert output_dup_blocks(io.StringIO(MAF), output) == 1
        assert output.getvalue() == "##maf version=1\n" + DUP_BLOCK

    def test_output_merged_consensus_blocks(self):
        output = io.StringIO()
        params = MergeParams(mode=ConsensusMode.UNANIMITY)
        assert output_merged_consensus_blocks(io.StringIO(MAF), output, params) == 2
        assert output.getvalue() == """##maf version=1
a score=1
s hg38.chr1 0 4 + 100 ACGT
s mm10.chr2 10 4 + 200 ACNA

a score=2
s hg38.chr1 4 3 + 100 T-TG
s rn6.chr3 0 4 + 50 TATG

"""

    def test_output_merged_default_params(self):
        output = io.StringIO()
        output_merged_consensus_blocks(io.StringIO(DUP_BLOCK), output)
        # G/T tie within mm10, broken by the column where G leads 2 to 1
        assert "s mm10.chr2 10 4 + 200 ACGA\n" in output.getvalue()

    def test_output_filtered_blocks(self):
        output = io.StringIO()
        ranges = RangeIndex([Range('chr1', 1, 3), Range('chr1', 5, 7)])
        assert output_filtered_blocks(io.StringIO(MAF), output, ranges) == 2
        assert output.getvalue() == """##maf version=1
a score=1
s hg38.chr1 1 2 + 100 CG
s mm10.chr2 11 2 + 200 CG
s mm10.chr5 21 2 - 300 CT

a score=2
s hg38.chr1 5 2 + 100 TG
s rn6.chr3 2 2 + 50 TG

"""

    def test_output_coverage(self):
        output = io.StringIO()
        records = output_coverage(io.StringIO(MAF), output, CoverageParams('hg38'))
        assert [(r.genome, r.coverage) for r in records] == [('hg38', 7), ('mm10', 4), ('rn6', 3)]
        lines = output.getvalue().splitlines()
        assert lines[0] == REPORT_HEADER
        assert lines[1] == "hg38\thg38\t100\t0.07\t7"
        assert len(lines) == 4

    def test_parse_error_propagates(self):
        """Blocks before the bad line are written, then the error is raised."""
        output = io.StringIO()
        with pytest.raises(UnrecognizedLineKindError):
            output_dup_blocks(io.StringIO(DUP_BLOCK + "a\nz bad line\n"), output)
        assert output.getvalue() == DUP_BLOCK


class TestParser:
    """Test argument parsing."""

    def test_merge_mode_choices(self):
        args = build_parser().parse_args(['merge_dups', 'mask'])
        assert args.mode == 'mask'
        assert args.input == '-' and args.output == '-'

    def test_invalid_mode(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['merge_dups', 'majority'])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_coverage_bed_optional(self):
        args = build_parser().parse_args(['coverage', 'hg38'])
        assert args.ref_genome == 'hg38'
        assert args.bed is None


class TestMain:
    """Test the command line entry point end to end."""

    @pytest.fixture
    def maf_path(self, tmp_path):
        path = tmp_path / "input.maf"
        path.write_text(MAF)
        return path

    @pytest.fixture
    def bed_path(self, tmp_path):
        path = tmp_path / "regions.bed"
        path.write_text("chr1\t1\t3\nchr1\t5\t7\n")
        return path

    def test_dup_blocks_to_stdout(self, maf_path, capsys):
        assert main(['-i', str(maf_path), 'dup_blocks']) == 0
        assert capsys.readouterr().out == "##maf version=1\n" + DUP_BLOCK

    def test_merge_dups_to_file(self, maf_path, tmp_path):
        out_path = tmp_path / "merged.maf"
        assert main(['-i', str(maf_path), '-o', str(out_path), 'merge_dups', 'mask']) == 0
        assert "s mm10.chr2 10 4 + 200 NNNN\n" in out_path.read_text()

    def test_coverage_with_bed(self, maf_path, bed_path, capsys):
        assert main(['-i', str(maf_path), 'coverage', 'hg38', '--bed', str(bed_path)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == REPORT_HEADER
        assert lines[1:] == [
            "hg38\thg38\t4\t1.0\t4",
            "hg38\tmm10\t4\t0.5\t2",
            "hg38\trn6\t4\t0.5\t2",
        ]

    def test_filter(self, maf_path, bed_path, capsys):
        assert main(['-i', str(maf_path), 'filter', str(bed_path)]) == 0
        assert "s rn6.chr3 2 2 + 50 TG\n" in capsys.readouterr().out

    def test_parse_error_exit_status(self, tmp_path, caplog):
        path = tmp_path / "bad.maf"
        path.write_text("a\ns hg38.chr1 0 4 + 100\n")
        with caplog.at_level(logging.ERROR):
            assert main(['-i', str(path), 'dup_blocks']) == 1
        assert "alignment" in caplog.text

    def test_errors_logged_under_module_logger(self, tmp_path, caplog):
        path = tmp_path / "bad.maf"
        path.write_text("a\nx unknown\n")
        with caplog.at_level(logging.ERROR):
            assert main(['-i', str(path), 'dup_blocks']) == 1
        assert [r.name for r in caplog.records] == ['maf_columns.cli']

    def test_missing_input(self, tmp_path):
        assert main(['-i', str(tmp_path / "missing.maf"), 'dup_blocks']) == 1

    def test_bad_bed(self, maf_path, tmp_path):
        bed = tmp_path / "wide.bed"
        bed.write_text("chr1\t0\t100\tname\t0\t+\t0\t100\t0\t2\t10,20\t0,80\n")
        assert main(['-i', str(maf_path), 'filter', str(bed)]) == 1

    def test_invalid_reference_genome(self, maf_path):
        assert main(['-i', str(maf_path), 'coverage', 'hg38.chr1']) == 1
