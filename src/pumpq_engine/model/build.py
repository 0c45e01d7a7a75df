"""Population building blocks for the evolutionary scheduler."""

import numpy as np

from pumpq_engine.core.constants import DEFAULT_TOURNAMENT_SIZE, HOURS_PER_DAY
from pumpq_engine.model.objective import Candidate


def random_candidate(max_active_pumps: int, rng: np.random.Generator) -> Candidate:
    """Create an unevaluated candidate with uniform genes in [0, max_active_pumps]."""
    genes = rng.integers(0, max_active_pumps + 1, size=HOURS_PER_DAY)
    return Candidate(chromosome=[int(g) for g in genes])


def initialize_population(size: int, max_active_pumps: int, rng: np.random.Generator) -> list[Candidate]:
    """Create ``size`` random candidates."""
    return [random_candidate(max_active_pumps, rng) for _ in range(size)]


def tournament_select(
    population: list[Candidate],
    rng: np.random.Generator,
    tournament_size: int = DEFAULT_TOURNAMENT_SIZE,
) -> Candidate:
    """Pick the fittest of ``tournament_size`` random draws (with replacement).

    Ties keep the earlier draw.
    """
    best = population[rng.integers(len(population))]

    for _ in range(1, tournament_size):
        contender = population[rng.integers(len(population))]
        if contender.fitness < best.fitness:
            best = contender

    return best


def crossover(
    parent1: Candidate, parent2: Candidate, rng: np.random.Generator
) -> tuple[Candidate, Candidate]:
    """Single-point crossover at a cut point drawn from [0, 24).

    Returns:
        Two unevaluated children
    """
    point = int(rng.integers(HOURS_PER_DAY))

    child1 = Candidate(chromosome=parent1.chromosome[:point] + parent2.chromosome[point:])
    child2 = Candidate(chromosome=parent2.chromosome[:point] + parent1.chromosome[point:])

    return child1, child2


def mutate(candidate: Candidate, max_active_pumps: int, rng: np.random.Generator) -> Candidate:
    """Replace one random gene with a uniform value in [0, max_active_pumps]."""
    point = int(rng.integers(HOURS_PER_DAY))
    genes = list(candidate.chromosome)
    genes[point] = int(rng.integers(0, max_active_pumps + 1))

    mutant = candidate.copy()
    mutant.chromosome = genes
    return mutant
