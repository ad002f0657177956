"""
Output persistence

Destination names are derived from the bundle name, so re-running the
extractor finds earlier results and skips them.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .common.logger import get_logger
from .common.utils import ensure_directory
from .errors import WriteFailure
from .models import ApplicationBundle
from .scanner import BUNDLE_SUFFIX

logger = get_logger(__name__)

OUTPUT_EXTENSION = '.png'

# Characters that cannot appear in a single path component
UNSAFE_CHARACTERS = '/:'


def sanitize_name(bundle_name: str) -> str:
    """
    Turn a bundle name into an output file stem

    Strips a trailing ``.app`` and replaces ``/`` and ``:`` with ``_``.

    Example:
        sanitize_name('My/Weird:App.app') -> 'My_Weird_App'
    """
    name = bundle_name
    if name.endswith(BUNDLE_SUFFIX):
        name = name[:-len(BUNDLE_SUFFIX)]
    for char in UNSAFE_CHARACTERS:
        name = name.replace(char, '_')
    return name


@dataclass(frozen=True)
class WriteResult:
    path: Path
    written: bool


class OutputWriter:
    """Writes one PNG per bundle into the output directory"""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def ensure_output_dir(self) -> Path:
        return ensure_directory(self.output_dir)

    def destination(self, bundle: ApplicationBundle) -> Path:
        return self.output_dir / f"{sanitize_name(bundle.name)}{OUTPUT_EXTENSION}"

    def exists(self, bundle: ApplicationBundle) -> bool:
        return self.destination(bundle).exists()

    def write(self, bundle: ApplicationBundle, data: bytes) -> WriteResult:
        """
        Persist PNG bytes for a bundle unless its output already exists

        Returns:
            WriteResult with ``written=False`` when the destination existed

        Raises:
            WriteFailure: the destination could not be written
        """
        path = self.destination(bundle)
        if path.exists():
            return WriteResult(path=path, written=False)

        try:
            f = open(path, 'xb')
        except FileExistsError:
            return WriteResult(path=path, written=False)
        except OSError as e:
            raise WriteFailure(f"write failed: {e.strerror or e}")

        # A partial file would be skipped as already extracted on every later run
        try:
            with f:
                f.write(data)
        except OSError as e:
            self._discard(path)
            raise WriteFailure(f"write failed: {e.strerror or e}")
        except BaseException:
            self._discard(path)
            raise

        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return WriteResult(path=path, written=True)

    def _discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[⚠] Could not remove incomplete output {path}: {e}")
