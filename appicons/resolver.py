"""
Icon source resolution

Locates the legacy ``.icns`` file of a bundle through an ordered chain:

1. the icon file declared in the manifest (``CFBundleIconFile``)
2. a fixed list of conventional file names
3. the first ``.icns`` file directly inside Contents/Resources

The first step that finds an existing file wins. Step 3 uses filesystem
enumeration order, which is not sorted and may differ between machines.
"""

import os
from pathlib import Path
from typing import Optional

from .common.logger import get_logger
from .manifest import ICON_FILE_KEY, ManifestReader
from .models import ApplicationBundle, Found, IconSource, NotFound

logger = get_logger(__name__)

LEGACY_ICON_EXTENSION = '.icns'

CONVENTIONAL_ICON_NAMES = (
    'AppIcon.icns',
    'icon.icns',
    'app.icns',
    'Icon.icns',
)


class IconSourceResolver:
    """Resolve where a bundle keeps its legacy icon file"""

    def __init__(self, manifest_reader: Optional[ManifestReader] = None):
        self.manifest_reader = manifest_reader or ManifestReader()

    def resolve(self, bundle: ApplicationBundle) -> IconSource:
        resources = bundle.resources_dir

        for step in (self._from_manifest, self._from_conventional_names, self._from_any_icns):
            path = step(bundle, resources)
            if path is not None:
                logger.debug(f"{bundle.name}: icon source {path} ({step.__name__})")
                return Found(path)

        logger.debug(f"{bundle.name}: no legacy icon file")
        return NotFound()

    def declared_icon_name(self, bundle: ApplicationBundle) -> Optional[str]:
        """Manifest icon name with the legacy extension appended when missing"""
        name = self.manifest_reader.read(bundle.path, ICON_FILE_KEY)
        if not name or not name.strip():
            return None
        name = name.strip()
        if not name.endswith(LEGACY_ICON_EXTENSION):
            name += LEGACY_ICON_EXTENSION
        return name

    def _from_manifest(self, bundle: ApplicationBundle, resources: Path) -> Optional[Path]:
        name = self.declared_icon_name(bundle)
        if name is None:
            return None
        candidate = resources / name
        if candidate.is_file():
            return candidate
        return None

    def _from_conventional_names(self, bundle: ApplicationBundle, resources: Path) -> Optional[Path]:
        for name in CONVENTIONAL_ICON_NAMES:
            candidate = resources / name
            if candidate.is_file():
                return candidate
        return None

    def _from_any_icns(self, bundle: ApplicationBundle, resources: Path) -> Optional[Path]:
        try:
            with os.scandir(resources) as entries:
                for entry in entries:
                    if entry.name.endswith(LEGACY_ICON_EXTENSION) and entry.is_file():
                        return Path(entry.path)
        except OSError:
            # Missing or unreadable Resources directory
            return None
        return None
