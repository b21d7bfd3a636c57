from __future__ import annotations

"""
Domain Error Types.

Exception hierarchy raised by the property computation, the resolution
interchange and the model loading layers.
"""

from typing import Optional


class ScanPropsError(Exception):
    """Base class for every error raised by the package."""


class MalformedOverrideError(ScanPropsError):
    """
    A deferred user override callback failed.

    Always fatal: the computation is aborted and no partial map is returned.

    Attributes:
        module_path: Path of the module whose callback failed.
        index: Position of the failing callback in registration order.
    """

    def __init__(self, module_path: str, index: int, cause: Optional[BaseException] = None):
        self.module_path = module_path
        self.index = index
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Property override #{index} of module '{module_path}' failed{detail}"
        )


class MissingCollaboratorDataError(ScanPropsError):
    """An external extractor could not find the metadata it needs."""


class CsvFormatError(ScanPropsError, ValueError):
    """A CSV-encoded value is malformed (e.g. hand-edited interchange file)."""


class ModelLoadError(ScanPropsError):
    """The module model file is missing, unreadable or structurally invalid."""


class ConfigError(ScanPropsError, ValueError):
    pass
