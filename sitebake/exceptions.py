"""
Exceptions raised while building a Sitebake site.

Every fatal error derives from SitebakeError so the command-line interface
can report it and exit with a non-zero status.
"""

from typing import Optional


class SitebakeError(Exception):
    """Base exception for all Sitebake errors."""

    pass


class DiscoveryError(SitebakeError):
    """Raised when no page templates match the configured glob."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"no page templates found: {pattern}")


class TemplateReadError(SitebakeError):
    """Raised when a page or shared fragment cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class TemplateParseError(SitebakeError):
    """Raised for malformed template syntax or a duplicate block name."""

    def __init__(self, message: str, filename: Optional[str] = None, lineno: Optional[int] = None):
        self.message = message
        self.filename = filename
        self.lineno = lineno
        location = filename or '<template>'
        if lineno:
            location = f"{location}:{lineno}"
        super().__init__(f"{location}: {message}")


class BlockNotFoundError(SitebakeError, LookupError):
    """Raised when a template set has no block with the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no block named {name!r} in template set")


class LayoutExecutionError(SitebakeError):
    """Raised when executing the selected layout for a page fails."""

    def __init__(self, page: str, layout: str, cause: Exception):
        self.page = page
        self.layout = layout
        self.cause = cause
        super().__init__(f"{page}: executing layout {layout!r}: {cause}")


class PathResolutionError(SitebakeError):
    """Raised when a page does not live under the pages root."""

    def __init__(self, page: str, root: str):
        self.page = page
        self.root = root
        super().__init__(f"{page}: page is not under pages root {root}")


class FilesystemError(SitebakeError):
    """Raised when creating a directory or writing an output file fails."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")

    @classmethod
    def from_os_error(cls, path: str, error: OSError) -> 'FilesystemError':
        return cls(error.filename or path, error.strerror or str(error))
