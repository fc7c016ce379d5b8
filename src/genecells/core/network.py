"""
Per-tick neural wiring and recurrent evaluation.

The sense phase turns each gene into a ``GeneInput`` and buckets it by
destination neuron (``CellBrain.add``). Several genes aimed at the same
destination accumulate; nothing is overwritten.

The act phase asks the brain for actuator drives. Internal neurons are
evaluated recursively against the same bucketed inputs, so the result only
ever depends on the start-of-tick world. Internal wiring may contain cycles:
any neuron re-entered while it is already being evaluated contributes 0,
which bounds recursion depth by the number of internal kinds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from genecells.core.genes import decode_gene, weight_to_float
from genecells.core.neurons import (
    ACTUATOR_COUNT,
    INTERNAL_COUNT,
    ActuatorNeuron,
    InternalNeuron,
    SensorContext,
    SensorNeuron,
    activate,
    evaluate_sensor,
    finite_or_zero,
)

if TYPE_CHECKING:
    from genecells.core.cell import Cell


@dataclass(frozen=True)
class SensorValue:
    """A sensor reading already taken this tick."""
    value: float
    weight: float = 1.0


@dataclass(frozen=True)
class InternalRef:
    """A deferred internal neuron of the cell with handle ``cell``."""
    kind: InternalNeuron
    cell: int
    weight: float = 1.0


GeneInput = Union[SensorValue, InternalRef]


class CellBrain:
    """One cell's bucketed gene inputs for a single tick."""

    def __init__(self, handle: int):
        self.handle = handle
        self.internal: list[list[GeneInput]] = [[] for _ in range(INTERNAL_COUNT)]
        self.actuators: list[list[GeneInput]] = [[] for _ in range(ACTUATOR_COUNT)]
        self._memo: dict[tuple[InternalNeuron, frozenset], float] = {}

    def add(self, gene_input: GeneInput, output_id: int, output_is_internal: bool) -> None:
        """Bucket an input under ``output_id`` reduced modulo the target set size.

        Raises:
            ValueError: If ``gene_input`` refers to another cell's internal
                neuron; a brain only resolves its own cell's neurons.
        """
        if isinstance(gene_input, InternalRef) and gene_input.cell != self.handle:
            raise ValueError(
                f"internal ref of cell {gene_input.cell} added to brain of cell {self.handle}"
            )
        if output_is_internal:
            self.internal[output_id % INTERNAL_COUNT].append(gene_input)
        else:
            self.actuators[output_id % ACTUATOR_COUNT].append(gene_input)
        self._memo.clear()

    def is_wired(self, kind: ActuatorNeuron) -> bool:
        return bool(self.actuators[kind.value])

    def wired_actuators(self) -> list[ActuatorNeuron]:
        return [kind for kind in ActuatorNeuron if self.actuators[kind.value]]

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def internal_value(self, kind: InternalNeuron) -> float:
        """Activation of an internal neuron, evaluated from scratch."""
        return self._evaluate(kind, frozenset())

    def actuator_drive(self, kind: ActuatorNeuron) -> float:
        """Weighted input sum feeding an actuator (before squashing)."""
        total = 0.0
        for gene_input in self.actuators[kind.value]:
            total += self._contribution(gene_input, frozenset())
        return finite_or_zero(total)

    def _evaluate(self, kind: InternalNeuron, active: frozenset) -> float:
        key = (kind, active)
        if key in self._memo:
            return self._memo[key]

        active = active | {kind}
        inputs = self.internal[kind.value]
        total = 0.0
        for gene_input in inputs:
            total += self._contribution(gene_input, active)
        value = activate(kind, finite_or_zero(total), len(inputs))
        self._memo[key] = value
        return value

    def _contribution(self, gene_input: GeneInput, active: frozenset) -> float:
        if isinstance(gene_input, SensorValue):
            return finite_or_zero(gene_input.value) * gene_input.weight
        # Re-entry of a neuron already on the evaluation path breaks the cycle
        if gene_input.kind in active:
            return 0.0
        return self._evaluate(gene_input.kind, active) * gene_input.weight


def wire(cell: Cell, handle: int, ctx: SensorContext, weight_scale: float) -> CellBrain:
    """
    Sense phase for one cell: decode every gene and bucket its input.

    Sensor sources are read immediately against ``ctx``; internal sources
    are deferred as ``InternalRef`` tagged with the owning cell's handle.
    """
    brain = CellBrain(handle)
    for gene in cell.genome:
        decoded = decode_gene(gene)
        weight = weight_to_float(decoded.weight, weight_scale)
        if decoded.input_is_internal:
            source: GeneInput = InternalRef(
                InternalNeuron.from_int(decoded.input_id), handle, weight,
            )
        else:
            reading = evaluate_sensor(
                SensorNeuron.from_int(decoded.input_id), cell, handle, ctx,
            )
            source = SensorValue(reading, weight)
        brain.add(source, decoded.output_id, decoded.output_is_internal)
    return brain
