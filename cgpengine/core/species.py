"""
Genome representation and decoding for Cartesian Genetic Programming.

A genome is a flat, fixed-length array of genes. The role of every gene
(function, connection or output) and its legal value range are derived
arithmetically from its position and the run parameters; nothing is stored
per gene. Mutation, crossover and the evaluator all go through GenomeLayout,
so they agree on the semantics by construction.

Layout for max_arity=2 (each node is one function gene followed by its
connection genes, output genes follow the node block):

    [f0 c0 c0' | f1 c1 c1' | ... | f(n-1) c c' | o0 o1 ... o(m-1)]

Node numbering: inputs are 0..num_inputs-1, function nodes follow in genome
order. Connection genes only ever reference smaller node numbers, which keeps
the decoded graph acyclic without any cycle check.
"""

from enum import Enum
from typing import List, Optional, Tuple, Any
import math
import operator

import numpy as np

from .parameters import CGPParameters
from .errors import OutOfRange, UnsupportedType, UnsupportedOperation, LengthMismatch


class GeneRole(Enum):
    """Role of a gene, determined purely by its position."""
    CONNECTION = 0
    FUNCTION = 1
    OUTPUT = 2


# Real-valued genes live in this closed interval
REAL_GENE_MIN = 0.0
REAL_GENE_MAX = 1.0


class GenomeLayout:
    """
    Position arithmetic over a parameter struct.

    All methods are pure functions of the position and the parameters,
    never of genome content.
    """

    def __init__(self, parameters: CGPParameters):
        self.parameters = parameters
        self.num_nodes = parameters.num_function_nodes
        self.num_inputs = parameters.num_inputs
        self.num_outputs = parameters.num_outputs
        self.num_functions = parameters.num_functions
        self.max_arity = parameters.max_arity
        self.node_size = self.max_arity + 1
        self.node_block = self.num_nodes * self.node_size

    def genome_size(self) -> int:
        return self.node_block + self.num_outputs

    def _check_position(self, position: int) -> int:
        try:
            position = operator.index(position)
        except TypeError:
            raise OutOfRange(f"Position must be an integer, got {position!r}") from None
        if not 0 <= position < self.genome_size():
            raise OutOfRange(
                f"Position {position} outside genome of size {self.genome_size()}"
            )
        return position

    def decode_role(self, position: int) -> GeneRole:
        position = self._check_position(position)
        if position >= self.node_block:
            return GeneRole.OUTPUT
        if position % self.node_size == 0:
            return GeneRole.FUNCTION
        return GeneRole.CONNECTION

    def node_number_of(self, position: int) -> int:
        """
        Global node number a position belongs to.

        Output positions map past the last function node using the historical
        offset num_nodes * max_arity.
        """
        if self.decode_role(position) == GeneRole.OUTPUT:
            return self.num_inputs + self.num_nodes + (position - self.num_nodes * self.max_arity)
        return self.num_inputs + position // self.node_size

    def position_of_node(self, node_number: int) -> int:
        """Position of a function node's function gene."""
        if not self.num_inputs <= node_number < self.num_inputs + self.num_nodes:
            raise OutOfRange(f"Node {node_number} is not a function node")
        return (node_number - self.num_inputs) * self.node_size

    def layer_of(self, position: int) -> int:
        """Layer index of a node position under fixed_layer topology."""
        position = self._check_position(position)
        return (position // self.node_size) // self.parameters.effective_layer_width

    def min_gene(self, position: int) -> int:
        role = self.decode_role(position)
        if role != GeneRole.CONNECTION:
            return 0

        node_number = self.node_number_of(position)
        if self.parameters.is_fixed_layers:
            layer = self.layer_of(position)
            if layer == 0:
                return 0
            return self.num_inputs + (layer - 1) * self.parameters.effective_layer_width
        return max(0, node_number - self.parameters.effective_levels_back)

    def max_gene(self, position: int) -> int:
        role = self.decode_role(position)
        if role == GeneRole.FUNCTION:
            return self.num_functions - 1
        if role == GeneRole.OUTPUT:
            return self.num_inputs + self.num_nodes - 1

        if self.parameters.is_fixed_layers:
            layer = self.layer_of(position)
            if layer == 0:
                return self.num_inputs - 1
            return self.num_inputs + layer * self.parameters.effective_layer_width - 1
        return self.node_number_of(position) - 1

    def num_choices(self, position: int) -> int:
        """Number of legal values at a position."""
        return self.max_gene(position) - self.min_gene(position) + 1

    def reinterpret_real(self, value: float, position: int) -> int:
        """
        Map a real gene in [0, 1] onto a discrete legal value.

        The value is scaled by the number of legal choices for the position
        (num_functions, num_inputs + num_nodes, or the node's own number for
        an unrestricted connection gene), floored and offset by min_gene.
        1.0 lands on the last choice.
        """
        value = float(value)
        if not REAL_GENE_MIN <= value <= REAL_GENE_MAX:
            raise OutOfRange(
                f"Real gene {value} outside [{REAL_GENE_MIN}, {REAL_GENE_MAX}]"
            )
        choices = self.num_choices(position)
        index = min(int(math.floor(value * choices)), choices - 1)
        return self.min_gene(position) + index

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Inclusive (min, max) arrays over every position."""
        size = self.genome_size()
        mins = np.array([self.min_gene(p) for p in range(size)], dtype=np.int64)
        maxs = np.array([self.max_gene(p) for p in range(size)], dtype=np.int64)
        return mins, maxs

    def output_positions(self) -> range:
        return range(self.node_block, self.genome_size())

    def __repr__(self):
        return (
            f"GenomeLayout(nodes={self.num_nodes}, inputs={self.num_inputs}, "
            f"outputs={self.num_outputs}, arity={self.max_arity}, "
            f"topology={self.parameters.topology})"
        )


def _coerce_genome(genome: Any) -> np.ndarray:
    """Turn genome input into an integer or floating array, rejecting anything else."""
    if isinstance(genome, np.ndarray):
        array = genome
    else:
        values = list(genome)
        kinds = set()
        for v in values:
            if isinstance(v, (bool, np.bool_)):
                kinds.add('other')
            elif isinstance(v, (int, np.integer)):
                kinds.add('int')
            elif isinstance(v, (float, np.floating)):
                kinds.add('float')
            else:
                kinds.add('other')
        if 'other' in kinds:
            raise UnsupportedType("Genes must be integers or reals")
        if len(kinds) > 1:
            raise UnsupportedType("Genome mixes integer and real genes")
        dtype = np.float64 if kinds == {'float'} else np.int64
        array = np.asarray(values, dtype=dtype)

    if array.dtype.kind in 'iu':
        return array.astype(np.int64)
    if array.dtype.kind == 'f':
        return array.astype(np.float64)
    raise UnsupportedType(f"Genome dtype {array.dtype} is neither integer nor real")


class Species:
    """
    A genome plus the layout that gives it meaning.

    The genome's dtype selects the representation: integer genes are direct
    function/node indices, real genes in [0, 1] are reinterpreted into
    discrete choices on demand. The genome array is read-only; operators
    build new Species rather than editing in place.
    """

    def __init__(self, parameters: CGPParameters, genome: Any):
        self.layout = GenomeLayout(parameters)
        array = _coerce_genome(genome)
        if array.ndim != 1 or array.shape[0] != self.layout.genome_size():
            raise LengthMismatch(
                f"Genome length {array.size} does not match genome size "
                f"{self.layout.genome_size()}"
            )
        array.flags.writeable = False
        self._genome = array
        self.validate()

    @property
    def parameters(self) -> CGPParameters:
        return self.layout.parameters

    @property
    def genome(self) -> np.ndarray:
        return self._genome

    @property
    def real_valued(self) -> bool:
        return self._genome.dtype.kind == 'f'

    def validate(self) -> None:
        """Raise OutOfRange for the first gene outside its legal range."""
        if self.real_valued:
            bad = np.flatnonzero(
                ~((self._genome >= REAL_GENE_MIN) & (self._genome <= REAL_GENE_MAX))
            )
            if bad.size:
                p = int(bad[0])
                raise OutOfRange(f"Real gene {self._genome[p]} at position {p} outside [0, 1]")
            return

        mins, maxs = self.layout.bounds()
        bad = np.flatnonzero((self._genome < mins) | (self._genome > maxs))
        if bad.size:
            p = int(bad[0])
            raise OutOfRange(
                f"Gene {self._genome[p]} at position {p} outside "
                f"[{mins[p]}, {maxs[p]}] ({self.layout.decode_role(p).name})"
            )

    # Position arithmetic, delegated to the layout

    def genome_size(self) -> int:
        return self.layout.genome_size()

    def decode_role(self, position: int) -> GeneRole:
        return self.layout.decode_role(position)

    def node_number_of(self, position: int) -> int:
        return self.layout.node_number_of(position)

    def position_of_node(self, node_number: int) -> int:
        return self.layout.position_of_node(node_number)

    def min_gene(self, position: int) -> int:
        return self.layout.min_gene(position)

    def max_gene(self, position: int) -> int:
        return self.layout.max_gene(position)

    def reinterpret_real(self, value: float, position: int) -> int:
        return self.layout.reinterpret_real(value, position)

    def to_discrete_genome(self) -> np.ndarray:
        """Integer genome decoded from a real-valued one."""
        if not self.real_valued:
            raise UnsupportedOperation("This method only supports real valued genomes")
        return np.array(
            [self.layout.reinterpret_real(v, p) for p, v in enumerate(self._genome)],
            dtype=np.int64,
        )

    def discrete_genome(self) -> np.ndarray:
        """Integer view of the genome regardless of representation."""
        if self.real_valued:
            return self.to_discrete_genome()
        return self._genome

    def to_list(self) -> List:
        return self._genome.tolist()

    def __len__(self) -> int:
        return self._genome.shape[0]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Species):
            return NotImplemented
        return (
            self.parameters == other.parameters
            and self._genome.dtype == other._genome.dtype
            and np.array_equal(self._genome, other._genome)
        )

    __hash__ = None

    def __repr__(self) -> str:
        kind = 'real' if self.real_valued else 'int'
        return f"Species(size={len(self)}, {kind}, {self.layout!r})"


def random_species(
    parameters: CGPParameters,
    rng: Optional[np.random.Generator] = None,
    real_valued: bool = False,
) -> Species:
    """
    Create a random valid species.

    Integer genes are drawn uniformly from [min_gene, max_gene] per position,
    real genes uniformly from [0, 1).
    """
    rng = rng if rng is not None else np.random.default_rng(parameters.seed)
    layout = GenomeLayout(parameters)

    if real_valued:
        genome = rng.random(layout.genome_size())
    else:
        mins, maxs = layout.bounds()
        genome = rng.integers(mins, maxs + 1)
    return Species(parameters, genome)

