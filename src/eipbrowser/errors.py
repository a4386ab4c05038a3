"""Exception types raised by eipbrowser."""

from __future__ import annotations


class EipBrowserError(Exception):
    """Base class for all eipbrowser errors."""


class MissingConfigurationError(EipBrowserError):
    """The repositories base path is unset or not a readable directory."""


class MalformedDocumentError(EipBrowserError):
    """A document file could not be read or its front-matter decoded."""

    def __init__(self, path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class SyncError(EipBrowserError):
    """A git clone/pull of a standards repository failed."""


class StorageError(EipBrowserError):
    """Persisted state could not be written."""
