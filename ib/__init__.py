import logging
import os
import random
import time
from typing import Callable, List, Union

from ib.mutation_operators import clone, crossover, mutate, random_candidate
from ib.patterns import PatternKind, render_target_pattern
from ib.types import (
    MAX_CHANNEL_DIFF,
    Candidate,
    ColorUnit,
    Population,
    RunConfig,
    TargetPattern,
    TargetSizeError,
    pixels_to_raster,
)
from ib.utils import save_png

logger = logging.getLogger(__name__)

TOURNAMENT_SIZE = 3

Saver = Callable[[bytes, int, int, str], bool]


def create_population(config: RunConfig, target: TargetPattern, rng: random.Random) -> Population:
    """Creates `config.population_size` randomized candidates and returns a 'Population' object.

    Args:
        'config' (RunConfig): the run's knobs.
        'target' (TargetPattern): the rendered pattern to evolve toward.
        'rng' (random.Random): the run's only random source.
    """
    size = config.width * config.height
    if (target.width, target.height) != (config.width, config.height) or len(target.pixels) != size:
        raise TargetSizeError(
            f"target is {target.width}x{target.height} with {len(target.pixels)} pixels, "
            f"candidates are {config.width}x{config.height}={size}"
        )

    units = [random_candidate(size, rng) for _ in range(config.population_size)]

    return Population(
        config=config,
        generation=0,
        pattern=target.label,
        target=target.to_raster(),
        units=units,
    )


def calculate_fitness(candidate: Candidate, target: Union[bytes, List[ColorUnit]]) -> float:
    """Scores a candidate as 1 - (total pixel difference / max possible difference).

    `target` is a raster, or a list of color units that gets rasterized first.
    """
    if not isinstance(target, (bytes, bytearray)):
        target = pixels_to_raster(target)
    if len(candidate.raster) != len(target):
        raise TargetSizeError(f"candidate has {candidate.size} pixels, target has {len(target) // 3}")

    # channel-wise sum equals the sum of per-pixel ColorUnit.difference
    total_diff = sum(abs(a - b) for a, b in zip(candidate.raster, target))
    max_possible_diff = len(target) // 3 * MAX_CHANNEL_DIFF

    candidate.fitness = 1.0 - total_diff / max_possible_diff
    return candidate.fitness


def evaluate_population(population: Population) -> Population:
    """ Evaluates every candidate against the target, then sorts the population best first.
    """
    for unit in population.units:
        calculate_fitness(unit, population.target)

    population.units.sort(key=lambda unit: unit.fitness, reverse=True)
    population.history.append(population.best.fitness)

    return population


def select_parent(population: Population, rng: random.Random) -> int:
    """Tournament selection. Contenders are drawn with replacement.

    Returns:
        int: index of the fittest contender in `population.units`.
    """
    best = rng.randrange(population.size)
    for _ in range(TOURNAMENT_SIZE - 1):
        contender = rng.randrange(population.size)
        if population.units[contender].fitness > population.units[best].fitness:
            best = contender

    return best


def reproduce(population: Population, rng: random.Random) -> Candidate:
    """Produces one offspring, either by crossover of two tournament winners or by cloning one.
    Both parents may be the same candidate.
    """
    config = population.config

    if rng.random() < config.crossover_rate:
        parent1 = population.units[select_parent(population, rng)]
        parent2 = population.units[select_parent(population, rng)]
        child = crossover(parent1, parent2, rng)
    else:
        child = clone(population.units[select_parent(population, rng)])

    return mutate(child, rng, config.mutation_rate, config.mutation_strength)


def create_new_generation(population: Population, rng: random.Random) -> Population:
    """Replaces the population with its elite plus `size - 1` fresh offspring.

    The population must be ranked. The elite is carried over as is and never mutated.
    """
    new_units = [population.best]
    while len(new_units) < population.config.population_size:
        new_units.append(reproduce(population, rng))

    population.units = new_units
    population.generation += 1

    return population


def run_for_n(n: int, population: Population, rng: random.Random) -> Population:
    """ Advances the population n generations, without termination checks or checkpoints.
    """
    for _ in range(n):
        create_new_generation(population, rng)
        evaluate_population(population)

    return population


def _checkpoint_name(generation: int) -> str:
    if generation == 0:
        return 'initial_random.png'
    return f'progress_gen_{generation}.png'


def save_checkpoint(population: Population, path: str, saver: Saver = save_png) -> bool:
    """Asks `saver` to write the current best candidate. A failed save is logged and recorded, not raised."""
    config = population.config
    if saver(population.best.to_raster(), config.width, config.height, path):
        population.checkpoints.append(path)
        return True

    logger.warning(f"Checkpoint at generation {population.generation} was not saved: {path}")
    population.failed_checkpoints.append(path)
    return False


def run(population: Population, rng: random.Random, output_dir: str = '.', saver: Saver = save_png) -> Population:
    """ Runs the genetic algorithm until the target fitness or the generation cap is reached.

    Args:
        population (Population): a population created by `create_population`.
        rng (random.Random): the same random source the population was created with.
        output_dir (str): where checkpoint images go.
        saver: persistence callable, `(raster, width, height, path) -> bool`.

    Returns:
        Population: the final, ranked population. `population.best` is the result.
    """
    config = population.config

    logger.info(f"Starting genetic algorithm to evolve {population.pattern}...")
    logger.info(
        f"Population: {config.population_size}, mutation rate: {config.mutation_rate}, "
        f"crossover rate: {config.crossover_rate}, target fitness: {config.target_fitness}"
    )

    start_time = time.time()

    evaluate_population(population)
    logger.info(f"Generation {population.generation}: best fitness = {population.best.fitness:.4f}")
    save_checkpoint(population, os.path.join(output_dir, _checkpoint_name(0)), saver)

    while population.generation < config.max_generations and population.best.fitness < config.target_fitness:
        create_new_generation(population, rng)
        evaluate_population(population)

        if population.generation % config.report_interval == 0:
            logger.info(f"Generation {population.generation}: best fitness = {population.best.fitness:.4f}")

        if population.generation % config.checkpoint_interval == 0:
            save_checkpoint(population, os.path.join(output_dir, _checkpoint_name(population.generation)), saver)

    end_time = time.time()

    if population.best.fitness >= config.target_fitness:
        logger.info(f"Target fitness reached at generation {population.generation}.")
    else:
        logger.info("Generation cap reached without hitting the target fitness.")
    logger.info(f"Evolution done. {end_time - start_time:.2f}s, best fitness {population.best.fitness:.4f}")

    return population


__all__ = [
    "PatternKind",
    "Population",
    "RunConfig",
    "TargetSizeError",
    "calculate_fitness",
    "create_new_generation",
    "create_population",
    "evaluate_population",
    "render_target_pattern",
    "reproduce",
    "run",
    "run_for_n",
    "save_checkpoint",
    "select_parent",
]
