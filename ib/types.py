import pydantic
from typing import List, Optional

MAX_CHANNEL_DIFF = 255 * 3


class TargetSizeError(ValueError):
    """Raised when a candidate grid and the target grid differ in length."""


class ColorUnit(pydantic.BaseModel):
    """ A single RGB pixel.

    Attributes:
        'r', 'g', 'b': 8-bit channel values in [0, 255].
    """
    r: int = pydantic.Field(default=0, ge=0, le=255)
    g: int = pydantic.Field(default=0, ge=0, le=255)
    b: int = pydantic.Field(default=0, ge=0, le=255)

    def difference(self, other: "ColorUnit") -> int:
        """Sum of absolute per-channel differences, in [0, 765]."""
        return abs(self.r - other.r) + abs(self.g - other.g) + abs(self.b - other.b)


def pixels_to_raster(pixels: List[ColorUnit]) -> bytes:
    """Row-major interleaved RGB bytes, 3 per pixel."""
    return bytes(channel for p in pixels for channel in (p.r, p.g, p.b))


def raster_to_pixels(raster: bytes) -> List[ColorUnit]:
    return [
        ColorUnit(r=raster[i], g=raster[i + 1], b=raster[i + 2])
        for i in range(0, len(raster) - len(raster) % 3, 3)
    ]


class Candidate(pydantic.BaseModel):
    """ One evolved image of the population.

    Pixel data lives in a flat, row-major RGB buffer so that copying a
    candidate is a single buffer copy.

    Attributes:
        'raster': interleaved RGB bytes, 3 per pixel.

        'fitness': similarity to the target in [0, 1], None until evaluated.
    """
    model_config = pydantic.ConfigDict(arbitrary_types_allowed=True)

    raster: bytearray
    fitness: Optional[float] = None

    @pydantic.field_validator('raster', mode='plain')
    @classmethod
    def _own_buffer(cls, value) -> bytearray:
        # every candidate owns its buffer, never a view of someone else's
        return bytearray(value)

    @classmethod
    def from_pixels(cls, pixels: List[ColorUnit], fitness: Optional[float] = None) -> "Candidate":
        return cls(raster=pixels_to_raster(pixels), fitness=fitness)

    @property
    def size(self) -> int:
        return len(self.raster) // 3

    @property
    def pixels(self) -> List[ColorUnit]:
        """A snapshot of the grid as color units. Editing it does not touch the candidate."""
        return raster_to_pixels(self.raster)

    def to_raster(self) -> bytes:
        return bytes(self.raster)


class TargetPattern(pydantic.BaseModel):
    """ A rendered target image together with its display label."""
    label: str
    width: int
    height: int
    pixels: List[ColorUnit]

    def to_raster(self) -> bytes:
        return pixels_to_raster(self.pixels)


class RunConfig(pydantic.BaseModel):
    """ Knobs of a single run, fixed once the population is created.

    Attributes:
        'population_size' (int): number of candidates per generation.

        'mutation_rate' (float): per-pixel mutation probability.

        'mutation_strength' (int): max absolute channel delta of a pixel mutation.

        'crossover_rate' (float): probability that a child comes from crossover instead of cloning.

        'max_generations' (int): generation cap.

        'target_fitness' (float): stop once the best candidate reaches this.

        'checkpoint_interval' (int): save the best image every n generations.

        'report_interval' (int): log progress every n generations.
    """
    model_config = pydantic.ConfigDict(frozen=True)

    population_size: int = pydantic.Field(default=200, ge=1)
    mutation_rate: float = pydantic.Field(default=0.03, ge=0.0, le=1.0)
    mutation_strength: int = pydantic.Field(default=25, ge=0)
    crossover_rate: float = pydantic.Field(default=0.6, ge=0.0, le=1.0)
    max_generations: int = pydantic.Field(default=5000, ge=0)
    target_fitness: float = 0.96
    checkpoint_interval: int = pydantic.Field(default=500, ge=1)
    report_interval: int = pydantic.Field(default=100, ge=1)
    width: int = pydantic.Field(default=32, ge=1)
    height: int = pydantic.Field(default=32, ge=1)


class Population(pydantic.BaseModel):
    """ Population model that holds the generation counter, the target, and the candidates.

    Attributes:
        'generation' (int): number of completed generation advances.

        'pattern' (str): label of the target pattern.

        'target' (bytes): raster of the grid every candidate is scored against.

        'units' (List[Candidate]): the individuals, best first after ranking.

        'history' (List[float]): best fitness after every evaluation.

        'checkpoints' / 'failed_checkpoints' (List[str]): saved and unsaved snapshot paths.
    """
    config: RunConfig
    generation: int = 0
    pattern: str
    target: bytes
    units: List[Candidate]
    history: List[float] = []
    checkpoints: List[str] = []
    failed_checkpoints: List[str] = []

    @property
    def size(self) -> int:
        return len(self.units)

    @property
    def best(self) -> Candidate:
        return self.units[0]
