"""
Icon extraction pipeline

For every bundle: skip if its PNG already exists, otherwise resolve the icon
source, convert it, and write the result. Each bundle ends in exactly one
ExtractionOutcome; a failure is recorded and the run moves on.
"""

from pathlib import Path
from typing import Dict, Iterable, Optional

from .backends import ConversionBackend
from .common.logger import get_logger
from .errors import ExtractionError
from .models import ApplicationBundle, ExtractionMethod, ExtractionOutcome, ExtractionStatus
from .resolver import IconSourceResolver
from .summary import RunSummary
from .writer import OutputWriter

logger = get_logger(__name__)


class IconExtractor:
    """Runs resolution, conversion and output for a sequence of bundles"""

    def __init__(self, resolver: IconSourceResolver, backend: ConversionBackend,
                 writer: OutputWriter):
        self.resolver = resolver
        self.backend = backend
        self.writer = writer
        # destination -> first bundle path that claimed it during this run
        self._claimed: Dict[Path, Path] = {}

    def process(self, bundle: ApplicationBundle) -> ExtractionOutcome:
        """Extract one bundle's icon; never raises for per-bundle problems"""
        destination = self.writer.destination(bundle)
        self._note_duplicate(bundle, destination)

        if self.writer.exists(bundle):
            return ExtractionOutcome.skipped(bundle, destination)

        try:
            source = self.resolver.resolve(bundle)
            icon = self.backend.extract(bundle, source)
            result = self.writer.write(bundle, icon.data)
        except ExtractionError as e:
            return ExtractionOutcome.failed(bundle, e.reason)
        except Exception as e:
            logger.debug(f"Unexpected error while processing {bundle.path}", exc_info=True)
            return ExtractionOutcome.failed(bundle, f"unexpected error: {e}")

        if not result.written:
            return ExtractionOutcome.skipped(bundle, result.path)
        return ExtractionOutcome.success(bundle, icon, result.path)

    def _note_duplicate(self, bundle: ApplicationBundle, destination: Path) -> None:
        first = self._claimed.setdefault(destination, bundle.path)
        if first != bundle.path:
            logger.warning(
                f"[⚠] {bundle.path} maps to the same output file as {first}; "
                f"an existing output is kept"
            )

    def run(self, bundles: Iterable[ApplicationBundle],
            summary: Optional[RunSummary] = None) -> RunSummary:
        """
        Process bundles sequentially and record every outcome

        Args:
            bundles: Bundles in processing order
            summary: Summary to record into (a new one if None)

        Returns:
            The summary; ``interrupted`` is set if Ctrl+C stopped the run
        """
        summary = summary if summary is not None else RunSummary()
        bundles = list(bundles)
        total = len(bundles)

        try:
            for index, bundle in enumerate(bundles, 1):
                outcome = self.process(bundle)
                summary.record(outcome)
                self.log_outcome(outcome, index, total)
        except KeyboardInterrupt:
            summary.interrupted = True
            logger.warning("[⚠] Interrupted, stopping before the next application")

        return summary

    def log_outcome(self, outcome: ExtractionOutcome, index: int, total: int) -> None:
        prefix = f"[{index:3d}/{total:3d}]"
        name = outcome.bundle.name

        if outcome.status is ExtractionStatus.SUCCESS:
            suffix = ' [Asset Catalog]' if outcome.method is ExtractionMethod.RENDER_EXTRACTION else ''
            logger.info(
                f"{prefix} [✓] Extracted: {name} → {outcome.output_path.name} "
                f"({outcome.dimensions_text}){suffix}"
            )
        elif outcome.status is ExtractionStatus.SKIPPED:
            logger.warning(f"{prefix} [⚠] Skipped (already exists): {name}")
        else:
            logger.error(f"{prefix} [✗] No icon extracted: {name} ({outcome.reason})")
