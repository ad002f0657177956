"""
Data model shared by the scanner, resolver, backends and summary
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union


class ExtractionStatus(Enum):
    SUCCESS = 'success'
    SKIPPED = 'skipped'
    FAILED = 'failed'


class ExtractionMethod(Enum):
    FILE_CONVERSION = 'file_conversion'
    RENDER_EXTRACTION = 'render_extraction'
    NONE = 'none'


@dataclass(frozen=True)
class ApplicationBundle:
    """An application bundle found on disk"""
    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'ApplicationBundle':
        path = Path(path).absolute()
        return cls(path=path, name=path.name)

    @property
    def contents_dir(self) -> Path:
        return self.path / 'Contents'

    @property
    def resources_dir(self) -> Path:
        return self.contents_dir / 'Resources'


@dataclass(frozen=True)
class Found:
    """Resolution located a legacy icon file"""
    path: Path

    @property
    def found(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """Resolution found no legacy icon file"""

    @property
    def found(self) -> bool:
        return False


IconSource = Union[Found, NotFound]

Dimensions = Tuple[int, int]


@dataclass(frozen=True)
class ConvertedIcon:
    """PNG bytes produced by one of the conversion strategies"""
    data: bytes
    method: ExtractionMethod
    dimensions: Optional[Dimensions] = None


@dataclass(frozen=True)
class ExtractionOutcome:
    """Terminal result for one bundle"""
    bundle: ApplicationBundle
    status: ExtractionStatus
    method: ExtractionMethod = ExtractionMethod.NONE
    dimensions: Optional[Dimensions] = None
    reason: Optional[str] = None
    output_path: Optional[Path] = None

    @classmethod
    def success(cls, bundle: ApplicationBundle, icon: ConvertedIcon,
                output_path: Path) -> 'ExtractionOutcome':
        return cls(bundle=bundle, status=ExtractionStatus.SUCCESS, method=icon.method,
                   dimensions=icon.dimensions, output_path=output_path)

    @classmethod
    def skipped(cls, bundle: ApplicationBundle, output_path: Path) -> 'ExtractionOutcome':
        return cls(bundle=bundle, status=ExtractionStatus.SKIPPED,
                   reason='already exists', output_path=output_path)

    @classmethod
    def failed(cls, bundle: ApplicationBundle, reason: str) -> 'ExtractionOutcome':
        return cls(bundle=bundle, status=ExtractionStatus.FAILED,
                   reason=reason or 'unknown error')

    @property
    def dimensions_text(self) -> str:
        if not self.dimensions:
            return 'unknown size'
        return f"{self.dimensions[0]}x{self.dimensions[1]}"

    def to_dict(self) -> dict:
        return {
            'name': self.bundle.name,
            'path': str(self.bundle.path),
            'status': self.status.value,
            'method': self.method.value,
            'dimensions': list(self.dimensions) if self.dimensions else None,
            'reason': self.reason,
            'output_path': str(self.output_path) if self.output_path else None,
        }
