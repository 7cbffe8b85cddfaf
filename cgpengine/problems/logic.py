"""
Logic synthesis: reproduce a truth table with Boolean circuits.

Fitness is the number of output bits that differ from the target (Hamming
distance) within the configured bit width. Inputs may be bit-parallel, i.e.
each element packs up to bit_width truth-table rows.
"""

from typing import Any, Sequence
import numpy as np

from .base import BlackBoxProblem
from ..core.errors import InvalidConfig


def popcount(values: np.ndarray) -> int:
    """Total number of set bits across non-negative integers."""
    return sum(bin(int(v)).count('1') for v in values)


class LogicSynthesisProblem(BlackBoxProblem):
    """Hamming-distance scorer for Boolean function synthesis."""

    name = 'Logic Synthesis Problem'

    def __init__(self, *args, bit_width: int = 1, **kwargs):
        super().__init__(*args, **kwargs)
        if not 1 <= bit_width <= 63:
            raise InvalidConfig(f"bit_width must be in [1, 63], got {bit_width}")
        if self.outputs.shape[1] != self.parameters.num_outputs:
            raise InvalidConfig(
                f"Targets have {self.outputs.shape[1]} columns, parameters declare "
                f"{self.parameters.num_outputs} outputs"
            )
        self.bit_width = bit_width
        self.mask = (1 << bit_width) - 1

    def evaluate(self, target: Sequence, phenotype_output: Sequence) -> float:
        self.check_output_length(phenotype_output)
        produced = np.asarray(phenotype_output, dtype=np.int64) & self.mask
        expected = np.asarray(target, dtype=np.int64) & self.mask
        return float(popcount(produced ^ expected))

    def validate(self, individual: Any) -> int:
        """Number of instances whose masked outputs match the target exactly."""
        matched = 0
        for i in range(self.num_instances):
            produced = np.asarray(self.phenotype(individual, i), dtype=np.int64) & self.mask
            expected = np.asarray(self.outputs[i], dtype=np.int64) & self.mask
            matched += int(np.array_equal(produced, expected))
        return matched
