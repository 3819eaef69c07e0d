import random

from ib.types import Candidate, ColorUnit

CHANNELS = ('r', 'g', 'b')


def _candidate(raster: bytearray) -> Candidate:
    # the buffer is freshly built by the caller, skip validation
    return Candidate.model_construct(raster=raster, fitness=None)


def mutate_pixel(raster: bytearray, index: int, rng: random.Random, strength: int) -> None:
    """Nudge one randomly chosen channel of pixel `index` by a delta in [-strength, strength], clamped to [0, 255]."""
    offset = index * 3 + rng.randint(0, 2)
    change = rng.randint(-strength, strength)
    raster[offset] = max(0, min(255, raster[offset] + change))


def mutate_color(color: ColorUnit, rng: random.Random, strength: int) -> None:
    """`mutate_pixel` for a standalone color unit."""
    buffer = bytearray((color.r, color.g, color.b))
    mutate_pixel(buffer, 0, rng, strength)
    for channel, value in zip(CHANNELS, buffer):
        setattr(color, channel, value)


def random_candidate(size: int, rng: random.Random) -> Candidate:
    return randomize(_candidate(bytearray(size * 3)), rng)


def randomize(candidate: Candidate, rng: random.Random) -> Candidate:
    """Give every channel of every pixel an independent uniform value in [0, 255]."""
    candidate.raster[:] = bytes(rng.randint(0, 255) for _ in range(len(candidate.raster)))
    candidate.fitness = None
    return candidate


def clone(candidate: Candidate) -> Candidate:
    """Copy the pixel data into a fresh, unevaluated candidate."""
    return _candidate(bytearray(candidate.raster))


# Crossover operators. Parents are never modified, children come back unevaluated.
def uniform_crossover(parent1: Candidate, parent2: Candidate, rng: random.Random) -> Candidate:
    """Take every pixel from either parent with equal probability."""
    raster = bytearray(parent1.raster)
    other = parent2.raster
    for start in range(0, len(raster), 3):
        if rng.random() >= 0.5:
            raster[start:start + 3] = other[start:start + 3]
    return _candidate(raster)


def single_point_crossover(parent1: Candidate, parent2: Candidate, split: int) -> Candidate:
    """Pixels before `split` come from parent1, the rest (split included) from parent2."""
    return _candidate(parent1.raster[:split * 3] + parent2.raster[split * 3:])


def random_single_point_crossover(parent1: Candidate, parent2: Candidate, rng: random.Random) -> Candidate:
    return single_point_crossover(parent1, parent2, rng.randrange(parent1.size))


def average_crossover(parent1: Candidate, parent2: Candidate, rng: random.Random) -> Candidate:
    """Every channel is the floored mean of both parents' channel."""
    return _candidate(bytearray((a + b) >> 1 for a, b in zip(parent1.raster, parent2.raster)))


CROSSOVERS = [
    uniform_crossover,
    random_single_point_crossover,
    average_crossover,
]


def crossover(parent1: Candidate, parent2: Candidate, rng: random.Random) -> Candidate:
    """Select and apply a random crossover operator.

    Args:
        parent1, parent2 (Candidate): parents of equal length, possibly the same object.
        rng (random.Random): the run's random source.

    Returns:
        Candidate: a new child with fitness unset.
    """
    operator = rng.choice(CROSSOVERS)
    return operator(parent1, parent2, rng)


def mutate(candidate: Candidate, rng: random.Random, mutation_rate: float, mutation_strength: int) -> Candidate:
    """Mutate each pixel independently with probability `mutation_rate`, in place."""
    mutated = False
    raster = candidate.raster
    for index in range(candidate.size):
        if rng.random() < mutation_rate:
            mutate_pixel(raster, index, rng, mutation_strength)
            mutated = True

    if mutated:
        candidate.fitness = None
    return candidate


__all__ = [
    "mutate_pixel",
    "mutate_color",
    "random_candidate",
    "randomize",
    "clone",
    "uniform_crossover",
    "single_point_crossover",
    "average_crossover",
    "crossover",
    "mutate",
    "CROSSOVERS",
]
