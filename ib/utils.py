import logging
import os

from PIL import Image

logger = logging.getLogger(__name__)


def save_png(raster: bytes, width: int, height: int, path: str) -> bool:
    """Write an interleaved RGB buffer as a PNG file.

    Returns:
        bool: whether the file was written. Failures are logged, never raised.
    """
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        image = Image.frombytes('RGB', (width, height), bytes(raster))
        image.save(path, format='PNG')
    except (OSError, ValueError) as exc:
        logger.error(f"Failed to save PNG {path}: {exc}")
        return False

    logger.info(f"Saved: {path}")
    return True
