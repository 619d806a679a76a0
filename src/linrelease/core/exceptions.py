"""Custom exceptions for linrelease"""


class LinReleaseError(Exception):
    """Base exception for linrelease"""

    pass


class ConfigurationError(LinReleaseError):
    """Configuration-related errors"""

    pass


class ManifestError(LinReleaseError):
    """Application manifest is missing or invalid"""

    pass


class TemplateError(LinReleaseError):
    """Packaging template could not be read or rendered"""

    pass


class FileOperationError(LinReleaseError):
    """File operation errors"""

    pass


class ArchiveError(LinReleaseError):
    """Resource archive could not be created"""

    pass
