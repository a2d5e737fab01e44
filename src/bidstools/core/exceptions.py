"""Custom exceptions for bidstools."""


class BidsToolsError(Exception):
    """Base exception for bidstools."""
    pass


class BIDSFilenameError(BidsToolsError, ValueError):
    """Invalid BIDS filename (malformed pair, duplicate key or empty key)."""
    pass


class BIDSStructureError(BidsToolsError, AssertionError):
    """Directory or filename layout breaks the BIDS structure contract.

    Raised regardless of the ``strict`` option.
    """
    pass


class MissingSidecarError(BidsToolsError, FileNotFoundError):
    """JSON sidecar was requested but does not exist."""
    pass


class ConfigurationError(BidsToolsError, ValueError):
    """Error in loader configuration."""
    pass
