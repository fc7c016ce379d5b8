"""
Genome: an ordered, fixed-length sequence of gene words.

Offspring mutation is Bernoulli per offspring, not per gene: one uniform
16-bit draw is compared against a fixed sentinel, and on a match exactly one
bit of one gene is flipped. The expected mutation rate is 1/65536.
"""

from __future__ import annotations

import numpy as np

from genecells.core.genes import DecodedGene, decode_gene

MUTATION_SENTINEL = 0x4C65
MUTATION_DRAW_RANGE = 1 << 16
GENE_BITS = 32


class Genome:
    """Gene words held in a ``uint32`` numpy array."""

    def __init__(self, genes) -> None:
        genes = np.asarray(genes, dtype=np.int64) & 0xFFFFFFFF
        if genes.ndim != 1 or genes.size == 0:
            raise ValueError("A genome needs at least one gene")
        self.genes: np.ndarray = genes.astype(np.uint32)

    @classmethod
    def zeros(cls, gene_count: int) -> Genome:
        if gene_count < 1:
            raise ValueError(f"gene_count must be at least 1, got {gene_count}")
        return cls(np.zeros(gene_count, dtype=np.uint32))

    @classmethod
    def random(cls, gene_count: int, rng: np.random.Generator) -> Genome:
        """Uniformly random 32-bit genes."""
        if gene_count < 1:
            raise ValueError(f"gene_count must be at least 1, got {gene_count}")
        return cls(rng.integers(0, 1 << GENE_BITS, size=gene_count, dtype=np.uint64))

    def __len__(self) -> int:
        return int(self.genes.size)

    def __getitem__(self, index: int) -> int:
        return int(self.genes[index])

    def __iter__(self):
        return (int(g) for g in self.genes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Genome):
            return NotImplemented
        return np.array_equal(self.genes, other.genes)

    def __repr__(self) -> str:
        return f"Genome({len(self)} genes)"

    def decoded(self) -> list[DecodedGene]:
        return [decode_gene(g) for g in self]

    def copy(self) -> Genome:
        return Genome(self.genes.copy())


def generate_offspring(genome: Genome, rng: np.random.Generator) -> Genome:
    """
    Deep-copy a genome, possibly flipping one bit.

    With probability 1/65536 a single pseudo-randomly chosen bit in one
    pseudo-randomly chosen gene is XOR-flipped. At most one mutation per
    offspring; the genome length never changes.
    """
    child = genome.copy()
    if int(rng.integers(0, MUTATION_DRAW_RANGE)) == MUTATION_SENTINEL:
        index = int(rng.integers(0, len(child)))
        bit = int(rng.integers(0, GENE_BITS))
        child.genes[index] ^= np.uint32(1 << bit)
    return child
