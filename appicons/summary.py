"""
Run summary

Collects one ExtractionOutcome per bundle and owns the exit status.
"""

from pathlib import Path
from typing import List, Optional, Union

from .models import ExtractionOutcome, ExtractionStatus

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


class RunSummary:
    """Counters and ordered outcome lists for one extraction run"""

    def __init__(self):
        self.total = 0
        self.successful = 0
        self.skipped = 0
        self.failed = 0
        self.failed_list: List[str] = []
        self.skipped_list: List[str] = []
        self.outcomes: List[ExtractionOutcome] = []
        self.interrupted = False
        self.png_count = 0
        self.total_png_bytes = 0
        self.finalized = False

    def record(self, outcome: ExtractionOutcome) -> None:
        if self.finalized:
            raise RuntimeError('summary already finalized')

        self.outcomes.append(outcome)
        self.total += 1

        if outcome.status is ExtractionStatus.SUCCESS:
            self.successful += 1
        elif outcome.status is ExtractionStatus.SKIPPED:
            self.skipped += 1
            self.skipped_list.append(outcome.bundle.name)
        else:
            self.failed += 1
            self.failed_list.append(f"{outcome.bundle.name} ({outcome.reason})")

    def check_invariant(self) -> None:
        if self.total != self.successful + self.skipped + self.failed:
            raise ValueError(
                f"inconsistent summary: total={self.total} successful={self.successful} "
                f"skipped={self.skipped} failed={self.failed}"
            )

    def finalize(self, output_dir: Optional[Union[str, Path]] = None) -> 'RunSummary':
        """Freeze the summary and measure the PNG files in ``output_dir``"""
        self.check_invariant()
        if output_dir is not None:
            self.png_count, self.total_png_bytes = self._measure(Path(output_dir))
        self.finalized = True
        return self

    @staticmethod
    def _measure(output_dir: Path):
        count = 0
        size = 0
        try:
            for png in output_dir.glob('*.png'):
                try:
                    size += png.stat().st_size
                    count += 1
                except OSError:
                    continue
        except OSError:
            return 0, 0
        return count, size

    @property
    def exit_code(self) -> int:
        if self.interrupted:
            return EXIT_INTERRUPTED
        return EXIT_FAILED if self.failed > 0 else EXIT_OK

    def to_dict(self) -> dict:
        return {
            'total': self.total,
            'successful': self.successful,
            'skipped': self.skipped,
            'failed': self.failed,
            'interrupted': self.interrupted,
            'png_count': self.png_count,
            'total_png_bytes': self.total_png_bytes,
            'failed_list': list(self.failed_list),
            'skipped_list': list(self.skipped_list),
            'outcomes': [outcome.to_dict() for outcome in self.outcomes],
        }
