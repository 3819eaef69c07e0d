import itertools

import pydantic
import pytest

from ib.types import Candidate, ColorUnit, RunConfig, pixels_to_raster


COLORS = [
    ColorUnit(r=0, g=0, b=0),
    ColorUnit(r=255, g=255, b=255),
    ColorUnit(r=12, g=200, b=99),
    ColorUnit(r=255, g=0, b=128),
]


def test_difference_is_symmetric_and_zero_on_self():
    for a, b in itertools.product(COLORS, repeat=2):
        assert a.difference(b) == b.difference(a)
    for a in COLORS:
        assert a.difference(a) == 0


def test_difference_range():
    assert ColorUnit(r=0, g=0, b=0).difference(ColorUnit(r=255, g=255, b=255)) == 765
    assert ColorUnit(r=10, g=20, b=30).difference(ColorUnit(r=13, g=15, b=30)) == 8


def test_difference_nonzero_for_distinct_colors():
    for a, b in itertools.combinations(COLORS, 2):
        assert a.difference(b) > 0


def test_channels_are_bounded():
    with pytest.raises(pydantic.ValidationError):
        ColorUnit(r=256, g=0, b=0)
    with pytest.raises(pydantic.ValidationError):
        ColorUnit(r=0, g=-1, b=0)


def test_to_raster_is_row_major_interleaved():
    candidate = Candidate.from_pixels([ColorUnit(r=1, g=2, b=3), ColorUnit(r=4, g=5, b=6)])
    assert candidate.to_raster() == bytes([1, 2, 3, 4, 5, 6])
    assert candidate.fitness is None


def test_pixels_to_raster_length():
    assert len(pixels_to_raster(COLORS)) == 3 * len(COLORS)


def test_run_config_defaults():
    config = RunConfig()
    assert config.population_size == 200
    assert config.mutation_rate == 0.03
    assert config.mutation_strength == 25
    assert config.crossover_rate == 0.6
    assert config.max_generations == 5000
    assert config.target_fitness == 0.96
    assert config.checkpoint_interval == 500
    assert (config.width, config.height) == (32, 32)


@pytest.mark.parametrize("field, value", [
    ("mutation_rate", 1.5),
    ("crossover_rate", -0.1),
    ("population_size", 0),
    ("mutation_strength", -1),
    ("max_generations", -1),
    ("checkpoint_interval", 0),
])
def test_run_config_rejects_invalid_values(field, value):
    with pytest.raises(pydantic.ValidationError):
        RunConfig(**{field: value})


def test_run_config_is_frozen():
    config = RunConfig()
    with pytest.raises(pydantic.ValidationError):
        config.population_size = 10


def test_candidate_round_trips_pixels():
    candidate = Candidate.from_pixels(COLORS, fitness=0.25)
    assert isinstance(candidate.raster, bytearray)
    assert candidate.size == len(COLORS)
    assert candidate.pixels == COLORS
    assert candidate.fitness == 0.25


def test_candidate_owns_its_buffer():
    source = bytearray([1, 2, 3])
    candidate = Candidate(raster=source)
    source[0] = 9
    assert candidate.raster == bytearray([1, 2, 3])
