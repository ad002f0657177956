"""
Conversion backends

Two strategies turn a bundle's icon into PNG bytes:

- FileConversion converts a located legacy ``.icns`` file, keeping the
  largest representation stored in the container.
- RenderExtraction asks the host icon renderer for the bundle's effective
  icon. It is the only option for bundles whose icon lives in a compiled
  asset catalog.

ConversionBackend tries them in that order. The external tools behind both
strategies are wrapped in small adapters that raise typed errors, so any
parsing of tool output stays inside the adapter.
"""

import io
import os
import shutil
import struct
import tempfile
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Type

from PIL import Image

from .common.logger import get_logger
from .common.utils import command_exists, run_command
from .errors import ConversionFailure, ExtractionError, RenderFailure, ResolutionAbsent
from .models import ApplicationBundle, ConvertedIcon, Dimensions, ExtractionMethod, IconSource

logger = get_logger(__name__)

NO_ICON_REASON = 'no icon found or extractable'

DEFAULT_RENDER_SIZE = 1024

# Looked up on PATH when APPICONS_RENDER_HELPER is not set
DEFAULT_RENDER_HELPER = 'extract-icon'

# Errors Pillow raises for truncated or unsupported image data
IMAGE_ERRORS = (OSError, ValueError, EOFError, SyntaxError, struct.error)


class LegacyIconConverter(Protocol):
    """Convert a legacy icon file to a PNG file"""

    def convert(self, source: Path, dest: Path) -> None:
        """Write ``dest`` or raise ConversionFailure."""


class IconRenderer(Protocol):
    """Render the effective icon of a bundle to an image file"""

    def render(self, bundle_path: Path, dest: Path, size: int) -> None:
        """Write ``dest`` or raise RenderFailure."""


def probe_dimensions(path: Path) -> Optional[Dimensions]:
    """Pixel size of an image file, or None if it cannot be decoded"""
    try:
        with Image.open(path) as img:
            return img.size
    except IMAGE_ERRORS:
        return None


def read_png(path: Path, method: ExtractionMethod,
             error: Type[ExtractionError]) -> ConvertedIcon:
    """
    Load a produced image file as PNG bytes

    Non-PNG output (e.g. TIFF from a helper) is re-encoded as PNG.

    Raises:
        error: when the file is missing, empty or does not decode
    """
    if not path.is_file() or path.stat().st_size == 0:
        raise error('no image was produced')

    dimensions = probe_dimensions(path)
    if dimensions is None:
        raise error('produced image is not decodable')

    try:
        with Image.open(path) as img:
            img.load()
            if img.format == 'PNG':
                data = path.read_bytes()
            else:
                buffer = io.BytesIO()
                img.save(buffer, format='PNG')
                data = buffer.getvalue()
    except IMAGE_ERRORS as e:
        raise error(f"produced image is not decodable: {e}")

    return ConvertedIcon(data=data, method=method, dimensions=dimensions)


class PillowIcnsConverter:
    """Convert .icns files with Pillow"""

    def convert(self, source: Path, dest: Path) -> None:
        try:
            with Image.open(source) as img:
                sizes = img.info.get('sizes')
                if sizes:
                    # Entries are (width, height, scale); compare pixel width
                    largest = max(sizes, key=lambda s: s[0] * s[-1])
                    logger.debug(f"{source.name}: {len(sizes)} representations, largest {largest}")
                    img.size = largest
                img.load()
                if img.mode not in ('RGBA', 'RGB', 'LA', 'L'):
                    img = img.convert('RGBA')
                img.save(dest, format='PNG')
        except IMAGE_ERRORS as e:
            raise ConversionFailure(f"cannot decode {source.name}: {e}")


class SipsConverter:
    """Convert .icns files with the macOS ``sips`` tool"""

    def __init__(self, timeout: int = 60):
        self.timeout = timeout

    def convert(self, source: Path, dest: Path) -> None:
        success, _, stderr = run_command(
            ['sips', '-s', 'format', 'png', str(source), '--out', str(dest)],
            timeout=self.timeout
        )
        if not success:
            raise ConversionFailure(f"sips failed: {stderr.strip() or 'non-zero exit status'}")


class HelperRenderer:
    """Render through an external helper invoked as ``<helper> <bundle> <dest>``"""

    def __init__(self, helper: str, timeout: int = 60):
        self.helper = helper
        self.timeout = timeout

    def available(self) -> bool:
        if command_exists(self.helper):
            return True
        return os.path.isfile(self.helper) and os.access(self.helper, os.X_OK)

    def render(self, bundle_path: Path, dest: Path, size: int) -> None:
        success, _, stderr = run_command(
            [self.helper, str(bundle_path), str(dest)],
            timeout=self.timeout
        )
        if not success:
            raise RenderFailure(f"icon helper failed: {stderr.strip() or 'non-zero exit status'}")


class QuickLookRenderer:
    """Render through Quick Look thumbnails (``qlmanage -t``)"""

    def __init__(self, timeout: int = 60):
        self.timeout = timeout

    def available(self) -> bool:
        return command_exists('qlmanage')

    def render(self, bundle_path: Path, dest: Path, size: int) -> None:
        with tempfile.TemporaryDirectory(prefix='appicons-ql-') as tmp:
            success, _, stderr = run_command(
                ['qlmanage', '-t', '-s', str(size), '-o', tmp, str(bundle_path)],
                timeout=self.timeout
            )
            # qlmanage exits 0 even when it generated nothing
            thumbnail = Path(tmp) / f"{bundle_path.name}.png"
            if not thumbnail.is_file():
                detail = stderr.strip() if not success and stderr.strip() else 'no thumbnail generated'
                raise RenderFailure(f"Quick Look failed: {detail}")
            shutil.move(str(thumbnail), str(dest))


class ChainedRenderer:
    """Try each available renderer in order until one produces an image"""

    def __init__(self, renderers: Sequence):
        self.renderers = list(renderers)

    def render(self, bundle_path: Path, dest: Path, size: int) -> None:
        reasons: List[str] = []
        for renderer in self.renderers:
            if not renderer.available():
                continue
            try:
                renderer.render(bundle_path, dest, size)
                return
            except RenderFailure as e:
                reasons.append(e.reason)
                logger.debug(f"{bundle_path.name}: {type(renderer).__name__}: {e.reason}")

        if not reasons:
            raise RenderFailure('no icon renderer available')
        raise RenderFailure('; '.join(reasons))


class FileConversion:
    """Convert a located legacy icon file into PNG bytes"""

    method = ExtractionMethod.FILE_CONVERSION

    def __init__(self, converter: LegacyIconConverter):
        self.converter = converter

    def extract(self, source: Path) -> ConvertedIcon:
        try:
            if source.stat().st_size == 0:
                raise ConversionFailure(f"{source.name} is empty")
        except OSError as e:
            raise ConversionFailure(f"cannot read {source}: {e.strerror or e}")

        with tempfile.TemporaryDirectory(prefix='appicons-') as tmp:
            dest = Path(tmp) / 'icon.png'
            self.converter.convert(source, dest)
            return read_png(dest, self.method, ConversionFailure)


class RenderExtraction:
    """Render the bundle's effective icon at the requested size"""

    method = ExtractionMethod.RENDER_EXTRACTION

    def __init__(self, renderer: IconRenderer, size: int = DEFAULT_RENDER_SIZE):
        self.renderer = renderer
        self.size = size

    def extract(self, bundle: ApplicationBundle) -> ConvertedIcon:
        with tempfile.TemporaryDirectory(prefix='appicons-') as tmp:
            dest = Path(tmp) / 'render.png'
            self.renderer.render(bundle.path, dest, self.size)
            icon = read_png(dest, self.method, RenderFailure)

        # A smaller result is the largest representation the bundle offers
        if icon.dimensions and max(icon.dimensions) < self.size:
            logger.debug(f"{bundle.name}: rendered at {icon.dimensions}, below {self.size}px")
        return icon


class ConversionBackend:
    """Dispatch between FileConversion and RenderExtraction"""

    def __init__(self, file_conversion: FileConversion, render_extraction: RenderExtraction):
        self.file_conversion = file_conversion
        self.render_extraction = render_extraction

    @classmethod
    def from_config(cls, config) -> 'ConversionBackend':
        """Build the backend described by an EnvConfig"""
        if config.converter == 'sips':
            converter = SipsConverter(timeout=config.tool_timeout)
        else:
            converter = PillowIcnsConverter()

        # An unavailable helper is skipped by ChainedRenderer
        renderers = [
            HelperRenderer(config.render_helper or DEFAULT_RENDER_HELPER, timeout=config.tool_timeout),
            QuickLookRenderer(timeout=config.tool_timeout),
        ]

        return cls(
            FileConversion(converter),
            RenderExtraction(ChainedRenderer(renderers), size=config.render_size)
        )

    def extract(self, bundle: ApplicationBundle, source: IconSource) -> ConvertedIcon:
        """
        Produce PNG bytes for a bundle

        Raises:
            ResolutionAbsent: no legacy icon file exists and rendering failed
            ExtractionError: neither strategy yielded a decodable PNG
        """
        if source.found:
            try:
                return self.file_conversion.extract(source.path)
            except ConversionFailure as e:
                logger.debug(f"{bundle.name}: file conversion failed: {e.reason}")

        try:
            return self.render_extraction.extract(bundle)
        except RenderFailure as e:
            logger.debug(f"{bundle.name}: render extraction failed: {e.reason}")

        if not source.found:
            raise ResolutionAbsent(NO_ICON_REASON)
        raise ExtractionError(NO_ICON_REASON)
