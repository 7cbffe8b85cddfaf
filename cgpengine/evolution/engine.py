"""
(1+λ) evolution strategy driving a CGP run.

Each generation:
1. Create λ offspring by mutating the parent
2. Evaluate offspring fitness (optionally in parallel)
3. Replace the parent with the best offspring if it is at least as good
   (neutral drift: equal fitness also replaces)
4. Record statistics, checkpoint, stop at the ideal fitness
"""

from contextlib import nullcontext
from dataclasses import dataclass, asdict
from datetime import datetime
from multiprocessing import Pool
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import logging
import time

import numpy as np

from ..core.errors import InvalidConfig
from ..core.species import Species
from ..problems.base import BlackBoxProblem
from ..problems.initializers import Composite
from .individual import Individual, create_random_individual
from .operators import MUTATIONS
from .checkpoint import (
    EvolutionCheckpoint,
    EvolutionHistory,
    GenerationStats,
    generate_run_id,
)


logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run."""
    # Strategy
    offspring: int = 4
    mutation: str = 'point'
    mutation_rate: float = 0.05
    num_genes: Optional[int] = None
    sigma: float = 0.1
    real_valued: bool = False

    # Termination
    max_generations: int = 10000

    # Reporting and checkpointing
    report_every: int = 100
    checkpoint_every: int = 0
    checkpoint_dir: Optional[str] = None

    # Parallelization
    n_workers: int = 1

    def __post_init__(self):
        if self.offspring < 1:
            raise InvalidConfig(f"offspring must be positive, got {self.offspring}")
        if self.mutation not in MUTATIONS:
            available = ', '.join(MUTATIONS.keys())
            raise InvalidConfig(f"Unknown mutation '{self.mutation}'. Available: {available}")
        if not 0.0 < self.mutation_rate <= 1.0:
            raise InvalidConfig(f"mutation_rate {self.mutation_rate} out of range (0, 1]")
        if self.n_workers < 1:
            raise InvalidConfig(f"n_workers must be positive, got {self.n_workers}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EvolutionResult:
    """Results from an evolution run."""
    run_id: str
    generations_completed: int
    total_evaluations: int
    best_fitness: float
    best_individual: Individual
    validation: int
    num_instances: int
    solved: bool
    history: EvolutionHistory
    runtime_seconds: float

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Evolution Run: {self.run_id}",
            f"Generations: {self.generations_completed}",
            f"Total evaluations: {self.total_evaluations}",
            f"Best fitness: {self.best_fitness:.4f}",
            f"Validation: {self.validation}/{self.num_instances}",
            f"Solved: {self.solved}",
            f"Runtime: {self.runtime_seconds:.1f}s",
        ]
        return '\n'.join(lines)


# Problem clone installed in each worker process by _init_worker
_worker_problem: Optional[BlackBoxProblem] = None


def _init_worker(problem: BlackBoxProblem) -> None:
    global _worker_problem
    _worker_problem = problem


def _evaluate_worker(genome: np.ndarray) -> float:
    """
    Worker function for parallel fitness evaluation.

    This is a module-level function to enable pickling for multiprocessing.
    """
    species = Species(_worker_problem.parameters, genome)
    return _worker_problem.fitness_of(species)


class EvolutionEngine:
    """
    (1+λ) evolutionary engine over a Composite produced by an initializer.
    """

    def __init__(
        self,
        composite: Composite,
        config: Optional[EvolutionConfig] = None,
        run_id: Optional[str] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize evolution engine.

        Args:
            composite: Parameters, evaluator and problem for the run
            config: Evolution configuration
            run_id: Optional run identifier (auto-generated if not provided)
            rng: numpy Generator (seeded from parameters.seed if omitted)
        """
        self.composite = composite
        self.problem = composite.problem
        self.parameters = composite.parameters
        self.config = config or EvolutionConfig()
        self.run_id = run_id or generate_run_id()
        self.rng = rng if rng is not None else np.random.default_rng(self.parameters.seed)
        self.mutate = MUTATIONS[self.config.mutation]

        self.parent: Optional[Individual] = None
        self.history = EvolutionHistory()
        self.generation = 0
        self.total_evaluations = 0

        self.checkpoint_dir = Path(self.config.checkpoint_dir) if self.config.checkpoint_dir else None

    def initialize_parent(self, individual: Optional[Individual] = None) -> Individual:
        """Set (or randomly create) and evaluate the initial parent."""
        if individual is None:
            individual = create_random_individual(
                self.parameters, self.rng, real_valued=self.config.real_valued,
            )
        individual.fitness = self.problem.fitness_of(individual)
        self.total_evaluations += 1
        self.parent = individual
        self.generation = 0
        self.history = EvolutionHistory()
        return individual

    def _create_offspring(self) -> List[Individual]:
        kwargs = {'mutation_rate': self.config.mutation_rate, 'sigma': self.config.sigma}
        if self.config.mutation == 'point':
            kwargs['num_genes'] = self.config.num_genes
        return [
            self.mutate(self.parent, self.rng, self.generation, **kwargs)
            for _ in range(self.config.offspring)
        ]

    def evaluate(self, individuals: List[Individual], pool=None) -> None:
        """Assign fitness to every individual, in parallel when a pool is given."""
        if pool is None:
            fitnesses = [self.problem.fitness_of(ind) for ind in individuals]
        else:
            fitnesses = pool.map(_evaluate_worker, [ind.genome for ind in individuals])
        for individual, fitness in zip(individuals, fitnesses):
            individual.fitness = float(fitness)
        self.total_evaluations += len(individuals)

    def _select(self, offspring: List[Individual]) -> bool:
        """Replace the parent with the best offspring if not worse. Returns strict improvement."""
        if self.parameters.minimizing_fitness:
            best = min(offspring, key=lambda ind: ind.fitness)
        else:
            best = max(offspring, key=lambda ind: ind.fitness)

        if not self.problem.is_better(best.fitness, self.parent.fitness):
            return False
        improved = best.fitness != self.parent.fitness
        self.parent = best
        return improved

    def run_generation(self, pool=None) -> GenerationStats:
        """Execute one generation of evolution."""
        if self.parent is None:
            self.initialize_parent()
        self.generation += 1

        offspring = self._create_offspring()
        self.evaluate(offspring, pool)
        improved = self._select(offspring)

        stats = self.history.record_generation(
            generation=self.generation,
            parent=self.parent,
            offspring=offspring,
            active_nodes=len(self.composite.evaluator.active_nodes(self.parent)),
            improved=improved,
        )
        if improved:
            logger.debug("Generation %d: fitness improved to %.4f", self.generation, self.parent.fitness)
        return stats

    def evolve(
        self,
        max_generations: Optional[int] = None,
        progress_callback: Optional[Callable[[int, int, Dict], None]] = None,
    ) -> EvolutionResult:
        """
        Run until the ideal fitness is reached or the generation budget is spent.

        Args:
            max_generations: Override config.max_generations
            progress_callback: Optional callback(gen, total_gens, stats)

        Returns:
            EvolutionResult with the best individual and statistics
        """
        if max_generations is None:
            max_generations = self.config.max_generations
        start_time = time.time()

        if self.parent is None:
            self.initialize_parent()
        logger.info(
            "Run %s: %s, parent fitness %.4f", self.run_id, self.problem.name, self.parent.fitness
        )

        if self.config.n_workers > 1:
            pool_context = Pool(
                self.config.n_workers, initializer=_init_worker, initargs=(self.problem.clone(),)
            )
        else:
            pool_context = nullcontext()

        with pool_context as pool:
            while self.generation < max_generations and not self.problem.is_ideal(self.parent.fitness):
                stats = self.run_generation(pool)

                if progress_callback:
                    progress_callback(self.generation, max_generations, stats.to_dict())

                if self.config.report_every and self.generation % self.config.report_every == 0:
                    logger.info(
                        "Generation %d: fitness %.4f, %d active nodes",
                        self.generation, self.parent.fitness, stats.active_nodes,
                    )

                if (self.checkpoint_dir and self.config.checkpoint_every
                        and self.generation % self.config.checkpoint_every == 0):
                    self.save_checkpoint()

        runtime = time.time() - start_time
        solved = self.problem.is_ideal(self.parent.fitness)
        logger.info(
            "Run %s finished after %d generations: fitness %.4f (solved=%s)",
            self.run_id, self.generation, self.parent.fitness, solved,
        )

        if self.checkpoint_dir:
            self.save_checkpoint()

        return EvolutionResult(
            run_id=self.run_id,
            generations_completed=self.generation,
            total_evaluations=self.total_evaluations,
            best_fitness=self.parent.fitness,
            best_individual=self.parent.copy(),
            validation=self.problem.validate(self.parent),
            num_instances=self.problem.num_instances,
            solved=solved,
            history=self.history,
            runtime_seconds=runtime,
        )

    def save_checkpoint(self) -> Path:
        """Save current evolution state to checkpoint file."""
        if self.checkpoint_dir is None:
            raise InvalidConfig("No checkpoint_dir configured")
        checkpoint = EvolutionCheckpoint(
            run_id=self.run_id,
            generation=self.generation,
            parent=self.parent.to_dict(),
            history=self.history.to_dict(),
            config=self.config.to_dict(),
            parameters=self.parameters.to_dict(),
            problem_name=self.problem.name,
            timestamp=datetime.now().isoformat(),
            total_evaluations=self.total_evaluations,
        )

        checkpoint_path = self.checkpoint_dir / f"{self.run_id}_gen{self.generation:06d}.json"
        checkpoint.save(checkpoint_path)
        logger.debug("Saved checkpoint %s", checkpoint_path)
        return checkpoint_path

    def load_checkpoint(self, checkpoint_path: Path) -> None:
        """Resume evolution from a checkpoint."""
        checkpoint = EvolutionCheckpoint.load(checkpoint_path)
        if checkpoint.get_parameters() != self.parameters:
            raise InvalidConfig("Checkpoint parameters do not match this run")

        self.run_id = checkpoint.run_id
        self.generation = checkpoint.generation
        self.parent = checkpoint.get_parent()
        self.history = EvolutionHistory.from_dict(checkpoint.history)
        self.total_evaluations = checkpoint.total_evaluations
        logger.info("Resumed run %s at generation %d", self.run_id, self.generation)
