"""
Checkpointing for evolutionary runs.

Enables:
- Saving the parent individual and run state for resumption
- Recording generation history
"""

from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from pathlib import Path
from datetime import datetime
import json
import uuid

from filelock import FileLock

from ..core.parameters import CGPParameters
from .individual import Individual


@dataclass
class EvolutionCheckpoint:
    """
    Checkpoint for resuming evolutionary runs.

    Contains all state needed to continue evolution from a saved point.
    """
    run_id: str
    generation: int
    parent: Dict[str, Any]            # Serialized individual
    history: Dict[str, List[Any]]     # Generation-by-generation stats
    config: Dict[str, Any]            # Evolution configuration
    parameters: Dict[str, Any]        # CGP parameters
    problem_name: str
    timestamp: str
    total_evaluations: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionCheckpoint':
        """Create from dictionary."""
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save checkpoint to JSON file under a file lock."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(path) + '.lock'):
            path.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(cls, path: Path) -> 'EvolutionCheckpoint':
        """Load checkpoint from JSON file."""
        path = Path(path)
        with FileLock(str(path) + '.lock'):
            data = json.loads(path.read_text())
        return cls.from_dict(data)

    def get_parameters(self) -> CGPParameters:
        return CGPParameters.from_dict(self.parameters)

    def get_parent(self) -> Individual:
        """Deserialize the parent individual."""
        return Individual.from_dict(self.parent, self.get_parameters())


@dataclass
class GenerationStats:
    """Statistics for a single generation."""
    generation: int
    parent_fitness: float
    best_offspring_fitness: float
    mean_offspring_fitness: float
    active_nodes: int
    evaluations_this_gen: int
    improved: bool
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EvolutionHistory:
    """
    Tracks evolution progress over generations.

    Records per-generation statistics for analysis and reporting.
    """

    def __init__(self):
        self.generations: List[GenerationStats] = []
        self.fitness_trajectory: List[float] = []

    def record_generation(
        self,
        generation: int,
        parent: Individual,
        offspring: List[Individual],
        active_nodes: int,
        improved: bool,
    ) -> GenerationStats:
        """
        Record statistics for a completed generation.

        Args:
            generation: Generation number
            parent: Parent after selection
            offspring: Evaluated offspring of this generation
            active_nodes: Active node count of the parent
            improved: Whether the parent fitness strictly improved

        Returns:
            GenerationStats for this generation
        """
        fitnesses = [o.fitness for o in offspring if o.fitness is not None]
        if not fitnesses:
            fitnesses = [parent.fitness]
        minimizing = parent.species.parameters.minimizing_fitness

        stats = GenerationStats(
            generation=generation,
            parent_fitness=parent.fitness,
            best_offspring_fitness=min(fitnesses) if minimizing else max(fitnesses),
            mean_offspring_fitness=sum(fitnesses) / len(fitnesses),
            active_nodes=active_nodes,
            evaluations_this_gen=len(offspring),
            improved=improved,
            timestamp=datetime.now().isoformat(),
        )

        self.generations.append(stats)
        self.fitness_trajectory.append(stats.parent_fitness)
        return stats

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to dictionary for serialization."""
        return {
            'generations': [g.to_dict() for g in self.generations],
            'fitness_trajectory': self.fitness_trajectory,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionHistory':
        """Restore history from dictionary."""
        history = cls()
        history.generations = [
            GenerationStats(**g) for g in data.get('generations', [])
        ]
        history.fitness_trajectory = data.get('fitness_trajectory', [])
        return history

    def improvements(self) -> List[int]:
        """Generations in which the parent strictly improved."""
        return [g.generation for g in self.generations if g.improved]


def generate_run_id() -> str:
    """Generate unique run identifier."""
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    short_uuid = uuid.uuid4().hex[:6]
    return f"cgp_{timestamp}_{short_uuid}"


def latest_checkpoint(checkpoint_dir: Path, run_id: Optional[str] = None) -> Optional[Path]:
    """Most recent checkpoint file in a directory (optionally for one run)."""
    pattern = f"{run_id}_gen*.json" if run_id else "*_gen*.json"
    candidates = sorted(Path(checkpoint_dir).glob(pattern), key=lambda p: p.stat().st_mtime)
    return candidates[-1] if candidates else None
