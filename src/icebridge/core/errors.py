"""Error taxonomy for catalog and table operations.

Every failure raised inside icebridge derives from IcebridgeError. The
boundary module converts these into tagged error results using `kind`.
"""

from __future__ import annotations


class IcebridgeError(RuntimeError):
    """Base class for all icebridge failures."""

    @property
    def kind(self) -> str:
        """Tag used for the error case of a boundary result."""
        return type(self).__name__


class ConfigError(IcebridgeError):
    """Raised when a connection descriptor is malformed."""


class CatalogError(IcebridgeError):
    """Raised when the remote catalog rejects a namespace or table operation."""


class TableLoadError(CatalogError):
    """Raised when a table vanished or never existed."""


class SchemaBuildError(IcebridgeError):
    """Raised when a field list cannot be turned into a schema."""


class InvalidIdentifierError(IcebridgeError, ValueError):
    """Raised when a namespace or table identifier cannot be normalized."""


class ExecutionPanic(IcebridgeError):
    """Raised when an operation failed unexpectedly inside the execution bridge."""


class ExecutionTimeout(ExecutionPanic):
    """
    Raised when an operation did not finish within the configured timeout.

    The awaiting task is cancelled, but a blocking pyiceberg call already
    running on a bridge worker thread cannot be interrupted; it keeps that
    worker busy until it returns on its own.
    """
