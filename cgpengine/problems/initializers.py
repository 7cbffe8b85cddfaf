"""
Initializers: wire parameters, function set, benchmark data and a problem
together before a run starts.

Each initializer follows the same template:
1. read_data()       - benchmark inputs/targets, num_variables, num_outputs
2. init_functions()  - function set variant
3. init_parameters() - final, validated CGPParameters
4. init_evaluator()  - evaluator bound to parameters and function set
5. init_problem()    - the scorer, plus fitness direction / ideal fitness

initialize() runs the steps and returns a Composite. Any misconfiguration
raises during initialize(), so a bad run never starts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import product
from pathlib import Path
from typing import Any, Dict, Optional, Sequence
import logging

import numpy as np

from ..core.parameters import CGPParameters
from ..core.functions import FunctionSet, get_function_set
from ..core.evaluator import Evaluator
from ..core.errors import InvalidConfig
from .base import BlackBoxProblem
from .royal_road import HollandRoyalRoadProblem, STRING_LENGTH
from .bit_count import BitCountClassifierProblem, POLICY_HARD
from .logic import LogicSynthesisProblem


logger = logging.getLogger(__name__)


@dataclass
class Composite:
    """Everything a run driver needs, assembled by an initializer."""
    parameters: CGPParameters
    functions: FunctionSet
    evaluator: Evaluator
    problem: BlackBoxProblem

    @property
    def num_instances(self) -> int:
        return self.problem.num_instances


class BlackBoxInitializer(ABC):
    """
    Template for setting up a black-box run.

    Keyword arguments not consumed by a subclass are treated as
    CGPParameters overrides (e.g. num_function_nodes, levels_back, topology).
    """

    def __init__(
        self,
        function_set: str = 'boolean',
        dtype: Any = None,
        constants: Optional[Sequence] = None,
        **parameter_overrides: Any,
    ):
        self.function_set = function_set
        self.dtype = dtype
        self.constants = list(constants) if constants is not None else []
        self.parameter_overrides: Dict[str, Any] = parameter_overrides

        self.inputs: Optional[np.ndarray] = None
        self.outputs: Optional[np.ndarray] = None
        self.num_instances: int = 0
        self.num_variables: int = 0
        self.num_outputs: int = 0
        self.minimizing_fitness: bool = True
        self.ideal_fitness: float = 0.0

        self.functions: Optional[FunctionSet] = None
        self.parameters: Optional[CGPParameters] = None
        self.evaluator: Optional[Evaluator] = None
        self.problem: Optional[BlackBoxProblem] = None

    @abstractmethod
    def read_data(self) -> None:
        """Populate inputs, outputs, num_instances, num_variables, num_outputs."""

    def init_functions(self) -> None:
        self.functions = get_function_set(self.function_set, self.dtype)

    def init_parameters(self) -> None:
        fields = dict(self.parameter_overrides)
        fields.update(
            num_variables=self.num_variables,
            num_outputs=self.num_outputs,
            num_constants=len(self.constants),
            num_functions=self.functions.num_functions,
            max_arity=self.functions.max_arity,
            minimizing_fitness=self.minimizing_fitness,
        )
        fields.setdefault('ideal_fitness', self.ideal_fitness)
        try:
            self.parameters = CGPParameters(**fields)
        except TypeError as e:
            raise InvalidConfig(str(e)) from e

    def init_evaluator(self) -> None:
        self.evaluator = Evaluator(self.parameters, self.functions, self.constants)

    @abstractmethod
    def init_problem(self) -> None:
        """Create self.problem from the prepared data."""

    def initialize(self) -> Composite:
        """Run every setup step and bundle the result."""
        self.read_data()
        self.init_functions()
        self.init_parameters()
        self.init_evaluator()
        self.init_problem()

        logger.info(
            "Initialized %s: %d instance(s), %d variable(s), %d output(s), %d nodes (%s)",
            self.problem.name, self.problem.num_instances, self.parameters.num_variables,
            self.parameters.num_outputs, self.parameters.num_function_nodes,
            self.parameters.topology,
        )
        return Composite(
            parameters=self.parameters,
            functions=self.functions,
            evaluator=self.evaluator,
            problem=self.problem,
        )


class HollandRoyalRoadInitializer(BlackBoxInitializer):
    """
    Royal Road setup: one instance with inputs (0, 1) and 240 outputs.

    The targets are placeholders; the scorer looks only at the phenotype.
    """

    def read_data(self) -> None:
        self.num_instances = 1
        self.num_variables = 2
        self.num_outputs = STRING_LENGTH
        self.inputs = np.array([[0, 1]])
        self.outputs = np.zeros((1, STRING_LENGTH), dtype=np.int64)
        self.minimizing_fitness = True
        self.ideal_fitness = 0.0

    def init_problem(self) -> None:
        self.problem = HollandRoyalRoadProblem(
            self.parameters, self.evaluator, self.inputs, self.outputs,
            self.constants, self.num_instances,
        )


class BitCountClassifierInitializer(BlackBoxInitializer):
    """
    Bit-count classifier setup from binary feature rows and labels.

    Data comes either from arrays or from an .npz file holding `inputs`
    (num_instances x num_features) and `labels` (num_instances,).
    Features are binarized: any non-zero value becomes 1.
    """

    def __init__(
        self,
        inputs: Optional[Sequence[Sequence]] = None,
        labels: Optional[Sequence[int]] = None,
        benchmark_file: Optional[str] = None,
        num_classes: int = 10,
        bits_per_class: int = 50,
        policy: str = POLICY_HARD,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        if benchmark_file is None and (inputs is None or labels is None):
            raise InvalidConfig("Provide inputs and labels, or a benchmark_file")
        self.raw_inputs = inputs
        self.raw_labels = labels
        self.benchmark_file = benchmark_file
        self.num_classes = num_classes
        self.bits_per_class = bits_per_class
        self.policy = policy

    def read_data(self) -> None:
        if self.benchmark_file is not None:
            path = Path(self.benchmark_file)
            with np.load(path) as data:
                inputs, labels = data['inputs'], data['labels']
            logger.info("Loaded %d instances from %s", len(labels), path)
        else:
            inputs, labels = self.raw_inputs, self.raw_labels

        inputs = (np.asarray(inputs) != 0).astype(np.int64)
        labels = np.asarray(labels, dtype=np.int64).reshape(-1, 1)
        if inputs.ndim != 2 or len(inputs) != len(labels):
            raise InvalidConfig(
                f"Expected one feature row per label, got inputs {inputs.shape} "
                f"and {len(labels)} labels"
            )

        self.inputs = inputs
        self.outputs = labels
        self.num_instances = len(labels)
        self.num_variables = inputs.shape[1]
        self.num_outputs = self.num_classes * self.bits_per_class
        self.minimizing_fitness = True
        if self.policy == POLICY_HARD:
            self.ideal_fitness = 0.0
        else:
            # Every instance correct with its whole block set
            self.ideal_fitness = -float(self.num_instances * self.bits_per_class)

    def init_problem(self) -> None:
        self.problem = BitCountClassifierProblem(
            self.parameters, self.evaluator, self.inputs, self.outputs,
            self.constants, self.num_instances,
            num_classes=self.num_classes, policy=self.policy,
        )


class ParityInitializer(BlackBoxInitializer):
    """Even-parity logic synthesis over every n-bit input combination."""

    def __init__(self, num_bits: int = 3, **kwargs: Any):
        super().__init__(**kwargs)
        if num_bits < 1:
            raise InvalidConfig(f"num_bits must be positive, got {num_bits}")
        self.num_bits = num_bits

    def read_data(self) -> None:
        rows = np.array(list(product((0, 1), repeat=self.num_bits)), dtype=np.int64)
        parity = (rows.sum(axis=1) % 2 == 0).astype(np.int64).reshape(-1, 1)

        self.inputs = rows
        self.outputs = parity
        self.num_instances = len(rows)
        self.num_variables = self.num_bits
        self.num_outputs = 1
        self.minimizing_fitness = True
        self.ideal_fitness = 0.0

    def init_problem(self) -> None:
        self.problem = LogicSynthesisProblem(
            self.parameters, self.evaluator, self.inputs, self.outputs,
            self.constants, self.num_instances, bit_width=1,
        )
