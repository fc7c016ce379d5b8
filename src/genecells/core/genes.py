"""
Gene word codec.

A gene is one 32-bit wiring instruction:

    bit  31     input_is_internal   (source is an internal neuron, else a sensor)
    bits 24-30  input_id            (raw, reduced modulo the catalog size later)
    bit  23     output_is_internal  (destination is internal, else an actuator)
    bits 16-22  output_id
    bits 0-15   weight              (two's-complement fixed point)

Decoding is total: every 32-bit pattern maps to some valid tuple.
"""

from __future__ import annotations

from typing import NamedTuple

GENE_MASK = 0xFFFFFFFF
ID_MASK = 0x7F
WEIGHT_MASK = 0xFFFF

INPUT_FLAG_BIT = 31
INPUT_ID_SHIFT = 24
OUTPUT_FLAG_BIT = 23
OUTPUT_ID_SHIFT = 16


class DecodedGene(NamedTuple):
    """Fields of a gene word, in encode-argument order."""
    input_id: int
    output_id: int
    weight: int
    input_is_internal: bool
    output_is_internal: bool


def encode_gene(
    input_id: int,
    output_id: int,
    weight: int,
    input_is_internal: bool,
    output_is_internal: bool,
) -> int:
    """
    Pack gene fields into an unsigned 32-bit word.

    Ids are masked to 7 bits and the weight to 16 bits; larger values
    silently truncate, so callers must pre-reduce them.
    """
    gene = ((input_id & ID_MASK) << INPUT_ID_SHIFT) | ((output_id & ID_MASK) << OUTPUT_ID_SHIFT)
    if input_is_internal:
        gene |= 1 << INPUT_FLAG_BIT
    if output_is_internal:
        gene |= 1 << OUTPUT_FLAG_BIT
    return gene | (weight & WEIGHT_MASK)


def decode_gene(gene: int) -> DecodedGene:
    """Unpack a gene word. Signed (negative) words are read as their 32-bit pattern."""
    gene = int(gene) & GENE_MASK
    return DecodedGene(
        input_id=(gene >> INPUT_ID_SHIFT) & ID_MASK,
        output_id=(gene >> OUTPUT_ID_SHIFT) & ID_MASK,
        weight=gene & WEIGHT_MASK,
        input_is_internal=bool((gene >> INPUT_FLAG_BIT) & 1),
        output_is_internal=bool((gene >> OUTPUT_FLAG_BIT) & 1),
    )


def weight_to_float(weight: int, scale: float) -> float:
    """Interpret the 16-bit weight field as signed fixed point."""
    weight &= WEIGHT_MASK
    if weight >= 0x8000:
        weight -= 0x10000
    return weight / scale
