"""
Run parameters for Cartesian Genetic Programming.

CGPParameters is the single explicit parameter struct that every
position-arithmetic query in the engine is computed from. It is fixed for
the lifetime of a run: initializers build it from their benchmark data
before the run starts, and with_updates() derives validated variants.
"""

from dataclasses import dataclass, asdict, replace
from typing import Dict, Any, Optional
from pathlib import Path
import json

from .errors import InvalidConfig


TOPOLOGY_CLASSIC = 'classic'
TOPOLOGY_FIXED_LAYER = 'fixed_layer'
TOPOLOGIES = (TOPOLOGY_CLASSIC, TOPOLOGY_FIXED_LAYER)


@dataclass(frozen=True)
class CGPParameters:
    """
    Structural and run-level parameters.

    Attributes:
        num_variables: Number of problem inputs fed per instance
        num_outputs: Number of output genes (phenotype length)
        num_function_nodes: Number of function nodes in the genome
        num_functions: Size of the function set (opcode count)
        max_arity: Largest arity in the function set
        num_constants: Constants appended after the variables as extra inputs
        levels_back: Backward reach of connection genes (classic topology)
        topology: 'classic' or 'fixed_layer'
        layer_width: Nodes per layer (fixed_layer topology)
        minimizing_fitness: Whether lower fitness is better
        ideal_fitness: Fitness at which a run is considered solved
        seed: Optional random seed for reproducibility
    """
    num_variables: int
    num_outputs: int
    num_function_nodes: int = 100
    num_functions: int = 8
    max_arity: int = 2
    num_constants: int = 0
    levels_back: Optional[int] = None
    topology: str = TOPOLOGY_CLASSIC
    layer_width: Optional[int] = None
    minimizing_fitness: bool = True
    ideal_fitness: float = 0.0
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate parameter consistency."""
        for name in ('num_variables', 'num_outputs', 'num_function_nodes',
                     'num_functions', 'max_arity'):
            if getattr(self, name) < 1:
                raise InvalidConfig(f"{name} must be positive, got {getattr(self, name)}")
        if self.num_constants < 0:
            raise InvalidConfig(f"num_constants must be >= 0, got {self.num_constants}")
        if self.topology not in TOPOLOGIES:
            raise InvalidConfig(
                f"Unknown topology '{self.topology}'. Available: {', '.join(TOPOLOGIES)}"
            )
        if self.levels_back is not None and self.levels_back < 1:
            raise InvalidConfig(f"levels_back must be >= 1, got {self.levels_back}")
        if self.topology == TOPOLOGY_FIXED_LAYER:
            width = self.effective_layer_width
            if width < 1 or self.num_function_nodes % width != 0:
                raise InvalidConfig(
                    f"num_function_nodes ({self.num_function_nodes}) must split into "
                    f"layers of width {width}"
                )

    @property
    def num_inputs(self) -> int:
        """Variables plus constants: the node numbers below the first function node."""
        return self.num_variables + self.num_constants

    @property
    def effective_levels_back(self) -> int:
        """levels_back, defaulting to unbounded reach over all earlier nodes."""
        if self.levels_back is None:
            return self.num_inputs + self.num_function_nodes
        return self.levels_back

    @property
    def effective_layer_width(self) -> int:
        """Layer width for fixed_layer topology (falls back to levels_back)."""
        if self.layer_width is not None:
            return self.layer_width
        if self.levels_back is not None:
            return self.levels_back
        return self.num_function_nodes

    @property
    def num_layers(self) -> int:
        if self.topology != TOPOLOGY_FIXED_LAYER:
            return 1
        return self.num_function_nodes // self.effective_layer_width

    @property
    def is_fixed_layers(self) -> bool:
        return self.topology == TOPOLOGY_FIXED_LAYER

    def with_updates(self, **changes: Any) -> 'CGPParameters':
        """Return a validated copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CGPParameters':
        """Create from dictionary, rejecting unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise InvalidConfig(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save parameters to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'CGPParameters':
        """Load parameters from a JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)
