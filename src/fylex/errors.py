"""Exception hierarchy for Fylex."""


class FylexError(Exception):
    """Base class for all Fylex errors."""


class CatalogError(FylexError):
    """A project catalog operation failed."""


class ScanError(CatalogError):
    """The root directory could not be listed."""


class AlreadyExists(CatalogError):
    """The target path of a new project already exists."""


class WriteError(CatalogError):
    """A project directory or its sidecar config could not be written."""


class ConfigExists(CatalogError):
    """The project already has a sidecar config."""


class InvalidName(CatalogError):
    """A user-supplied name or tag is empty or unusable."""


class HandoffError(FylexError):
    """Control could not be transferred to the shell."""
