"""
appicons

Extracts the icon of every installed macOS application into a folder of
high-resolution PNG files:
- Bundle discovery under the standard application folders
- Icon source resolution from Info.plist and Resources
- Conversion of legacy .icns files or rendering of asset-catalog icons
- Idempotent output and a run summary
"""

__version__ = "1.0.0"
__all__ = [
    'BundleScanner',
    'IconSourceResolver',
    'ConversionBackend',
    'OutputWriter',
    'RunSummary',
    'IconExtractor',
]

from .scanner import BundleScanner
from .resolver import IconSourceResolver
from .backends import ConversionBackend
from .writer import OutputWriter
from .summary import RunSummary
from .extractor import IconExtractor
