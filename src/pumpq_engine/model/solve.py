"""Evolutionary search and result extraction."""

import logging
import time
from typing import Optional

import numpy as np

from pumpq_engine.core.baseline import compute_uniform_cost, simulate_reservoir
from pumpq_engine.core.schemas import (
    AlgorithmDescriptor,
    OptimizedSchedule,
    OptimizerOptions,
    ScheduleRequest,
)
from pumpq_engine.core.validate import coerce
from pumpq_engine.model.build import crossover, initialize_population, mutate, tournament_select
from pumpq_engine.model.objective import Candidate, evaluate_candidate

logger = logging.getLogger(__name__)


def optimize_pump_schedule(
    request: ScheduleRequest | dict,
    options: Optional[OptimizerOptions | dict] = None,
    rng: Optional[np.random.Generator] = None,
) -> OptimizedSchedule:
    """Search for the cheapest feasible 24-hour pump schedule.

    Generational loop with elitism by truncation:
    1. Evaluate a random initial population
    2. Fill an offspring pool in pairs via tournament selection and
       single-point crossover (or cloning)
    3. Mutate offspring from index ``elite_count`` onwards
    4. Merge parents and offspring, keep the ``population_size`` fittest
    5. Repeat for a fixed number of generations

    Args:
        request: Demand, tariffs, starting level, pumps and constraints
        options: Algorithm parameters (defaults when omitted)
        rng: Random source (fresh unseeded generator when omitted)

    Returns:
        OptimizedSchedule for the fittest candidate

    Raises:
        InputValidationError: If the request or options are malformed
    """
    request = coerce(ScheduleRequest, request)
    options = coerce(OptimizerOptions, options or {})
    rng = rng if rng is not None else np.random.default_rng()

    max_pumps = request.constraints.max_active_pumps
    start_time = time.time()

    population = [
        evaluate_candidate(ind.chromosome, request)
        for ind in initialize_population(options.population_size, max_pumps, rng)
    ]
    population.sort(key=lambda ind: ind.fitness)
    history = [population[0].fitness]

    for generation in range(options.generations):
        offspring: list[Candidate] = []

        while len(offspring) < options.population_size:
            parent1 = tournament_select(population, rng, options.tournament_size)
            parent2 = tournament_select(population, rng, options.tournament_size)

            if rng.random() < options.crossover_rate:
                offspring.extend(crossover(parent1, parent2, rng))
            else:
                offspring.extend([parent1.copy(), parent2.copy()])

        for i in range(options.elite_count, len(offspring)):
            if rng.random() < options.mutation_rate:
                offspring[i] = mutate(offspring[i], max_pumps, rng)

        evaluated = [evaluate_candidate(ind.chromosome, request) for ind in offspring]

        combined = population + evaluated
        combined.sort(key=lambda ind: ind.fitness)
        population = combined[: options.population_size]

        history.append(population[0].fitness)
        logger.debug("Generation %d: best fitness %.2f", generation + 1, population[0].fitness)

    best = population[0]
    uniform_cost = compute_uniform_cost(request)

    logger.debug(
        "Search finished in %.3fs: cost %.0f vs uniform %.0f",
        time.time() - start_time,
        best.cost,
        uniform_cost,
    )

    return OptimizedSchedule(
        planning=best.chromosome,
        cost=best.cost,
        savings=uniform_cost - best.cost,
        uniform_cost=uniform_cost,
        power_factor=best.power_factor,
        reservoir_levels=simulate_reservoir(best.chromosome, request),
        fitness=best.fitness,
        fitness_history=history,
    )


def describe_optimizer(options: Optional[OptimizerOptions | dict] = None) -> AlgorithmDescriptor:
    """Describe the scheduler and its active parameters."""
    options = coerce(OptimizerOptions, options or {})
    return AlgorithmDescriptor(
        name="Evolutionary Multi-Objective Pump Scheduler",
        parameters=options.model_dump(),
        description=(
            "Optimizes pump scheduling for energy cost minimization while "
            "maintaining reservoir levels and power factor constraints"
        ),
    )
