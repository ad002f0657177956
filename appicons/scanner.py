"""
Application bundle discovery

Enumerates ``*.app`` directories directly below each search root. The order
within a root is whatever the filesystem returns and is deliberately left
unsorted; it is stable per machine but not across machines.
"""

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from .common.logger import get_logger
from .models import ApplicationBundle

logger = get_logger(__name__)

BUNDLE_SUFFIX = '.app'

DEFAULT_SEARCH_ROOTS = (
    Path('/Applications'),
    Path.home() / 'Applications',
    Path('/System/Applications'),
)


class BundleScanner:
    """Finds application bundles under a fixed list of root directories"""

    def __init__(self, roots: Optional[Iterable[Union[str, Path]]] = None):
        if roots is None:
            roots = DEFAULT_SEARCH_ROOTS
        self.roots: List[Path] = [Path(root) for root in roots]

    def scan_root(self, root: Path) -> Iterator[ApplicationBundle]:
        """Yield the bundles at depth 1 of one root"""
        if not root.is_dir():
            logger.debug(f"Search root not present: {root}")
            return

        logger.info(f"[INFO] Searching: {root}")
        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    if not entry.name.endswith(BUNDLE_SUFFIX):
                        continue
                    try:
                        is_dir = entry.is_dir()
                    except OSError:
                        continue
                    if is_dir:
                        yield ApplicationBundle.from_path(entry.path)
        except PermissionError as e:
            logger.warning(f"[⚠] Cannot read {root}: {e}")

    def scan(self) -> Iterator[ApplicationBundle]:
        """Yield bundles root by root, in root-list order"""
        for root in self.roots:
            yield from self.scan_root(root)

    def find_all(self) -> List[ApplicationBundle]:
        return list(self.scan())
