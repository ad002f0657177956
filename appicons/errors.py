"""
Error types raised by the extraction pipeline

Every per-bundle failure derives from ExtractionError and carries a short
human readable reason that ends up in the run summary.
"""


class AppIconsError(Exception):
    """Base class for all appicons errors"""
    pass


class ConfigurationError(AppIconsError):
    """Invalid environment configuration"""
    pass


class ExtractionError(AppIconsError):
    """A single bundle could not be turned into a PNG"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ResolutionAbsent(ExtractionError):
    """No legacy icon file could be located inside the bundle"""
    pass


class ConversionFailure(ExtractionError):
    """The legacy icon file could not be converted"""
    pass


class RenderFailure(ExtractionError):
    """The host icon renderer produced nothing usable"""
    pass


class WriteFailure(ExtractionError):
    """The destination PNG could not be written"""
    pass
