"""
Phenotype evaluation: decode a genome into its active graph and execute it.

Only nodes reachable from the output genes are computed. Since every
connection points to a smaller node number, ascending node order is a valid
topological order and a single forward pass suffices.
"""

from typing import Dict, List, Optional, Sequence, Any
import numpy as np

from .parameters import CGPParameters
from .functions import FunctionSet
from .species import Species, GenomeLayout
from .errors import InvalidConfig, LengthMismatch


def _species_of(individual: Any) -> Species:
    """Accept either a Species or anything carrying one as `.species`."""
    if isinstance(individual, Species):
        return individual
    return individual.species


class Evaluator:
    """
    Executes decoded genomes against input vectors.

    The evaluator holds no per-call state: each call allocates its own node
    value buffer, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        parameters: CGPParameters,
        functions: FunctionSet,
        constants: Optional[Sequence] = None,
    ):
        """
        Args:
            parameters: Run parameters (must match the function set)
            functions: Function set used to execute nodes
            constants: Values appended after the variables of every input vector
        """
        if functions.num_functions != parameters.num_functions:
            raise InvalidConfig(
                f"Function set has {functions.num_functions} functions, "
                f"parameters declare {parameters.num_functions}"
            )
        if functions.max_arity > parameters.max_arity:
            raise InvalidConfig(
                f"Function set arity {functions.max_arity} exceeds max_arity "
                f"{parameters.max_arity}"
            )

        constants = np.array([] if constants is None else constants, dtype=functions.dtype)
        if constants.size != parameters.num_constants:
            raise InvalidConfig(
                f"Expected {parameters.num_constants} constants, got {constants.size}"
            )
        constants.flags.writeable = False

        self.parameters = parameters
        self.functions = functions
        self.constants = constants
        self.layout = GenomeLayout(parameters)

    def active_nodes(self, individual: Any) -> List[int]:
        """Sorted function-node numbers reachable from the outputs."""
        genome = _species_of(individual).discrete_genome()
        layout = self.layout
        num_inputs = layout.num_inputs

        active = set()
        stack = [int(genome[p]) for p in layout.output_positions()]
        while stack:
            node = stack.pop()
            if node < num_inputs or node in active:
                continue
            active.add(node)
            position = layout.position_of_node(node)
            arity = self.functions.arity_of(int(genome[position]))
            stack.extend(int(g) for g in genome[position + 1:position + 1 + arity])

        return sorted(active)

    def _input_buffer(self, input_vector: Sequence) -> np.ndarray:
        variables = np.asarray(input_vector, dtype=self.functions.dtype)
        if variables.ndim != 1 or variables.shape[0] != self.parameters.num_variables:
            raise LengthMismatch(
                f"Input vector of length {variables.size}, expected "
                f"{self.parameters.num_variables}"
            )
        values = np.zeros(self.layout.num_inputs + self.layout.num_nodes,
                          dtype=self.functions.dtype)
        values[:variables.shape[0]] = variables
        values[variables.shape[0]:self.layout.num_inputs] = self.constants
        return values

    def evaluate_iterative(self, individual: Any, input_vector: Sequence) -> np.ndarray:
        """
        Run the individual's active graph on one input vector.

        Args:
            individual: Species or object with a `.species` attribute
            input_vector: num_variables values (constants are appended)

        Returns:
            Output vector of length num_outputs, in the function set dtype
        """
        genome = _species_of(individual).discrete_genome()
        values = self._input_buffer(input_vector)

        for node in self.active_nodes(individual):
            position = self.layout.position_of_node(node)
            opcode = int(genome[position])
            arity = self.functions.arity_of(opcode)
            args = values[genome[position + 1:position + 1 + arity]]
            values[node] = self.functions.call(args, opcode)

        outputs = genome[self.layout.node_block:]
        return values[outputs].copy()

    def evaluate_all(self, individual: Any, inputs: Sequence[Sequence]) -> np.ndarray:
        """Output vectors for every instance, stacked row-wise."""
        return np.stack([self.evaluate_iterative(individual, row) for row in inputs])

    def describe(self, individual: Any) -> List[str]:
        """Expression string for every output, e.g. 'XOR(x0, NOT(x1))'."""
        genome = _species_of(individual).discrete_genome()
        layout = self.layout
        num_variables = self.parameters.num_variables
        labels: Dict[int, str] = {}

        def label(node: int) -> str:
            if node < num_variables:
                return self.functions.input_label(node)
            if node < layout.num_inputs:
                return str(self.constants[node - num_variables])
            return labels[node]

        # Ascending order guarantees every predecessor is labelled first
        for node in self.active_nodes(individual):
            position = layout.position_of_node(node)
            opcode = int(genome[position])
            arity = self.functions.arity_of(opcode)
            args = ', '.join(label(int(g)) for g in genome[position + 1:position + 1 + arity])
            labels[node] = f"{self.functions.name_of(opcode)}({args})"

        return [label(int(genome[p])) for p in layout.output_positions()]

    def __repr__(self):
        return f"Evaluator({self.functions!r}, {self.layout!r})"
