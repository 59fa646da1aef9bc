"""
Custom exceptions for the Greenfield SDK.
"""


class GreenfieldError(Exception):
    """Base exception for all Greenfield-specific errors."""

    pass


class GreenfieldIntegrityError(GreenfieldError):
    """Base exception for integrity hash computation errors."""

    pass


class GreenfieldChainError(GreenfieldError):
    """Base exception for chain-related errors."""

    pass


# Integrity hashing errors
class GreenfieldMissingInputError(GreenfieldIntegrityError):
    """Raised when no content stream is supplied."""

    pass


class GreenfieldConfigUnavailableError(GreenfieldIntegrityError):
    """Raised when the redundancy parameters could not be fetched."""

    pass


class GreenfieldInvalidConfigError(GreenfieldIntegrityError, ValueError):
    """Raised when the redundancy parameters are out of the supported range."""

    pass


class GreenfieldReconstructionError(GreenfieldInvalidConfigError):
    """Raised when a segment cannot be rebuilt from the supplied pieces."""

    pass


class GreenfieldReadError(GreenfieldIntegrityError):
    """Raised when reading the content stream fails mid-operation."""

    pass


class GreenfieldHashCancelledError(GreenfieldIntegrityError):
    """Raised when hashing is cancelled at a segment boundary."""

    pass


# Chain errors
class GreenfieldChainConnectionError(GreenfieldChainError):
    """Raised when there's an issue connecting to the chain REST endpoint."""

    pass


class GreenfieldBroadcastError(GreenfieldChainError):
    """Raised when a transaction could not be broadcast."""

    pass


# Message construction errors
class GreenfieldInvalidNameError(GreenfieldError, ValueError):
    """Raised when a bucket or object name violates the naming rules."""

    pass


class GreenfieldInvalidMessageError(GreenfieldError, ValueError):
    """Raised when a message fails basic validation."""

    pass
