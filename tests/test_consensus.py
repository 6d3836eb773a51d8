#!/usr/bin/env python3
"""
Tests for duplicate detection and consensus merging.
"""

import io

import pytest
from maf_columns import (
    DEFAULT_MERGE_PARAMS,
    BaseCounts,
    ConsensusMode,
    MergeParams,
    Strand,
    UnalignedEntry,
    consensus_base,
    duplicate_entries,
    get_base_counts,
    has_duplicates,
    merge_duplicates,
    next_block,
    unanimous_base,
)


DUP_BLOCK = """a score=10
s       Gallus_gallus.chr1 4432333   6       +       157682039  CAACAG
s       Alca_torda.scaffold4709 42333   6       -       157682  CAACAG
e       Anas_platyrhynchos.chr2 10 5 + 100 I
s       Alca_torda.scaffold4709 41641   6       -       157682  CTAC-G
"""

NON_DUP_BLOCK = """a
s       Erythrocercus_mccallii.scaffold_2093    58535   1       +       127396  T
s       Eubucco_bourcierii.scaffold13745        58548   1       +       73788   C
s       Fregata_magnificens.C5769372__2.0       142     1       +       150     T
s       Galbula_dea.scaffold1422        3938    1       -       1348798 C
s       Gavia_stellata.scaffold9486     35556   1       +       49599   T
"""


def parse(text):
    return next_block(io.StringIO(text))


class TestUnanimousBase:
    """Test calling a base only when every duplicate agrees."""

    @pytest.mark.parametrize("counts,expected", [
        (BaseCounts(c=10), 'C'),
        (BaseCounts(t=10), 'T'),
        (BaseCounts(a=9, t=1), 'N'),
        (BaseCounts(), 'N'),
    ])
    def test_unanimous_base(self, counts, expected):
        assert unanimous_base(counts) == expected

    def test_custom_unresolved(self):
        assert unanimous_base(BaseCounts(a=1, g=1), unresolved='X') == 'X'


class TestConsensusBase:
    """Test majority calling with block-wide tie breaking."""

    def test_majority(self):
        assert consensus_base(BaseCounts(6, 5, 5, 5), BaseCounts()) == 'A'

    def test_tie_broken(self):
        assert consensus_base(BaseCounts(4, 4, 5, 5), BaseCounts(1, 1, 2, 1)) == 'G'

    def test_tie_unresolved(self):
        assert consensus_base(BaseCounts(4, 5, 4, 5), BaseCounts(1, 2, 1, 2)) == 'N'

    def test_tie_breaker_only_among_tied(self):
        """A base outside the tie cannot win through the tie breaker."""
        assert consensus_base(BaseCounts(a=2, c=2, g=1), BaseCounts(a=1, c=3, g=9)) == 'C'

    def test_empty_column(self):
        assert consensus_base(BaseCounts(), BaseCounts()) == 'N'


class TestBaseCounts:
    """Test column tallies."""

    def test_get_base_counts(self):
        block = parse("""a
s       Gallus_gallus.chr1 4432333   6       +       157682039  CAG
s       Alca_torda.scaffold4709 42333   6       -       157682  TAG
s       Alca_torda.scaffold4709 41641   6       -       157682  G-A
""")
        assert get_base_counts(list(block.aligned_entries())) == [
            BaseCounts(a=0, c=1, g=1, t=1),
            BaseCounts(a=2),
            BaseCounts(a=1, g=2),
        ]

    def test_case_insensitive(self):
        block = parse("a\ns x.1 0 2 + 9 aC\ns y.1 0 2 + 9 Ac\n")
        assert get_base_counts(list(block.aligned_entries())) == [BaseCounts(a=2), BaseCounts(c=2)]

    def test_ambiguity_codes_ignored(self):
        block = parse("a\ns x.1 0 1 + 9 N\ns y.1 0 1 + 9 R\n")
        assert get_base_counts(list(block.aligned_entries())) == [BaseCounts()]


class TestDuplicates:
    """Test detection of genomes appearing more than once."""

    def test_has_duplicates(self):
        assert has_duplicates(parse(DUP_BLOCK))
        assert not has_duplicates(parse(NON_DUP_BLOCK))

    def test_unaligned_entries_not_duplicates(self):
        block = parse("a\ns hg.chr1 0 1 + 9 A\ne hg.chr2 0 1 + 9 I\n")
        assert not has_duplicates(block)

    def test_duplicate_entries(self):
        groups = duplicate_entries(parse(DUP_BLOCK))
        assert list(groups) == ['Alca_torda']
        assert [e.start for e in groups['Alca_torda']] == [42333, 41641]


class TestMergeParams:
    """Test parameter validation."""

    def test_defaults(self):
        assert DEFAULT_MERGE_PARAMS.mode is ConsensusMode.CONSENSUS
        assert DEFAULT_MERGE_PARAMS.unresolved_base == 'N'

    def test_mode_must_be_enum(self):
        with pytest.raises(ValueError, match="ConsensusMode"):
            MergeParams(mode='mask')

    @pytest.mark.parametrize("base", ['', 'NN', None])
    def test_unresolved_base(self, base):
        with pytest.raises(ValueError, match="single character"):
            MergeParams(unresolved_base=base)


class TestMergeDuplicates:
    """Test collapsing duplicated genomes into one entry."""

    def merged_alignment(self, mode):
        merged = merge_duplicates(parse(DUP_BLOCK), MergeParams(mode=mode))
        return merged.entries[-1].alignment

    def test_unanimity(self):
        """Gaps are not votes, so A/- stays A."""
        assert self.merged_alignment(ConsensusMode.UNANIMITY) == 'CNACAG'

    def test_consensus(self):
        """The A/T tie is broken by the whole column, where A leads 2 to 1."""
        assert self.merged_alignment(ConsensusMode.CONSENSUS) == 'CAACAG'

    def test_mask(self):
        assert self.merged_alignment(ConsensusMode.MASK) == 'NNNNNN'

    def test_default_params(self):
        assert merge_duplicates(parse(DUP_BLOCK)).entries[-1].alignment == 'CAACAG'

    def test_entry_layout(self):
        """Kept entries keep their order and merged entries follow them."""
        merged = merge_duplicates(parse(DUP_BLOCK))
        assert [e.seq for e in merged.entries] == [
            'Gallus_gallus.chr1',
            'Anas_platyrhynchos.chr2',
            'Alca_torda.scaffold4709',
        ]
        assert isinstance(merged.entries[1], UnalignedEntry)
        assert merged.metadata == {'score': '10'}

    def test_coordinates_from_first_duplicate(self):
        alca = merge_duplicates(parse(DUP_BLOCK)).entries[-1]
        assert alca.start == 42333
        assert alca.aligned_length == 6
        assert alca.strand is Strand.NEGATIVE
        assert alca.sequence_size == 157682

    def test_no_duplicates_after_merge(self):
        assert not has_duplicates(merge_duplicates(parse(DUP_BLOCK)))

    def test_input_unchanged(self):
        block = parse(DUP_BLOCK)
        merge_duplicates(block, MergeParams(mode=ConsensusMode.MASK))
        assert [e.alignment for e in block.aligned_entries()] == ['CAACAG', 'CAACAG', 'CTAC-G']
        assert len(block.entries) == 4

    def test_non_duplicate_block_unchanged(self):
        block = parse(NON_DUP_BLOCK)
        merged = merge_duplicates(block)
        assert merged == block
        assert merged is not block

    def test_two_duplicated_genomes(self):
        """Merged entries follow first-appearance order of their genomes."""
        block = parse("""a
s b.chr1 0 2 + 9 AC
s a.chr1 0 2 + 9 GG
s solo.chr1 0 2 + 9 TT
s b.chr2 0 2 + 9 AC
s a.chr2 0 2 + 9 GT
""")
        merged = merge_duplicates(block, MergeParams(mode=ConsensusMode.UNANIMITY))
        assert [(e.seq, e.alignment) for e in merged.entries] == [
            ('solo.chr1', 'TT'),
            ('b.chr1', 'AC'),
            ('a.chr1', 'GN'),
        ]

    def test_custom_unresolved_base(self):
        merged = merge_duplicates(parse(DUP_BLOCK),
                                  MergeParams(mode=ConsensusMode.MASK, unresolved_base='X'))
        assert merged.entries[-1].alignment == 'XXXXXX'
