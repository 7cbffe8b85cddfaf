"""
Black-box problem protocol.

A problem scores phenotype output vectors. It owns read-only benchmark data
(per-instance input and target vectors) and a reference to the evaluator
used to produce phenotypes, and holds no mutable state of its own: evaluate()
is a pure function, so one instance (or its clones) can be shared across
workers.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
import copy

import numpy as np

from ..core.parameters import CGPParameters
from ..core.evaluator import Evaluator
from ..core.errors import InvalidConfig, LengthMismatch


def freeze(data: Any, dtype: Any = None, ndim: int = 2) -> np.ndarray:
    """Copy benchmark data into a read-only array of the given rank."""
    array = np.array(data, dtype=dtype, copy=True)
    if array.ndim != ndim:
        raise InvalidConfig(f"Expected {ndim}-dimensional benchmark data, got shape {array.shape}")
    array.flags.writeable = False
    return array


class BlackBoxProblem(ABC):
    """
    Base class for problems defined purely by scoring phenotype outputs.

    Attributes:
        name: Display name
        parameters: Run parameters
        evaluator: Executes individuals on input vectors
        inputs: Read-only (num_instances x num_variables) array
        outputs: Read-only (num_instances x k) array of targets
        constants: Read-only constants shared with the evaluator
        num_instances: Number of benchmark instances used for fitness
    """

    name = 'Black-box problem'
    # Score phenotypes as bit strings
    single_bit_outputs = False

    def __init__(
        self,
        parameters: CGPParameters,
        evaluator: Evaluator,
        inputs: Sequence[Sequence],
        outputs: Sequence[Sequence],
        constants: Optional[Sequence] = None,
        num_instances: Optional[int] = None,
    ):
        dtype = evaluator.functions.dtype
        self.parameters = parameters
        self.evaluator = evaluator
        self.inputs = freeze(inputs, dtype)
        self.outputs = freeze(outputs)
        self.constants = freeze([] if constants is None else constants, dtype, ndim=1)
        self.num_instances = len(self.inputs) if num_instances is None else num_instances

        if not 0 < self.num_instances <= min(len(self.inputs), len(self.outputs)):
            raise InvalidConfig(
                f"num_instances={self.num_instances} but benchmark has "
                f"{len(self.inputs)} inputs and {len(self.outputs)} targets"
            )
        if self.inputs.shape[1] != parameters.num_variables:
            raise InvalidConfig(
                f"Input vectors have {self.inputs.shape[1]} variables, "
                f"parameters declare {parameters.num_variables}"
            )

    @abstractmethod
    def evaluate(self, target: Sequence, phenotype_output: Sequence) -> float:
        """Fitness of one phenotype output vector against its target."""

    def check_output_length(self, phenotype_output: Sequence, error=LengthMismatch) -> None:
        if len(phenotype_output) != self.parameters.num_outputs:
            raise error(
                f"{self.name} expects {self.parameters.num_outputs} outputs, "
                f"got {len(phenotype_output)}"
            )

    def phenotype(self, individual: Any, instance: int) -> np.ndarray:
        """
        Output vector of an individual on one benchmark instance.

        Integer outputs of problems with single_bit_outputs are masked to
        their lowest bit, since Boolean primitives act on the full width.
        """
        output = self.evaluator.evaluate_iterative(individual, self.inputs[instance])
        if self.single_bit_outputs and output.dtype.kind in 'iu':
            output = output & 1
        return output

    def fitness_of(self, individual: Any) -> float:
        """Sum of evaluate() over every benchmark instance."""
        return float(sum(
            self.evaluate(self.outputs[i], self.phenotype(individual, i))
            for i in range(self.num_instances)
        ))

    def validate(self, individual: Any) -> int:
        """
        Number of instances whose outputs reproduce the target exactly.

        Reporting metric only, never used for selection.
        """
        return sum(
            int(np.array_equal(self.phenotype(individual, i), self.outputs[i]))
            for i in range(self.num_instances)
        )

    def is_better(self, fitness: float, other: float) -> bool:
        """Whether fitness is at least as good as other, under the run's direction."""
        if self.parameters.minimizing_fitness:
            return fitness <= other
        return fitness >= other

    def is_ideal(self, fitness: float) -> bool:
        return self.is_better(fitness, self.parameters.ideal_fitness)

    def clone(self) -> 'BlackBoxProblem':
        """Independent scorer sharing the same read-only benchmark data."""
        return copy.copy(self)

    def __repr__(self):
        return f"{type(self).__name__}(instances={self.num_instances}, outputs={self.parameters.num_outputs})"
