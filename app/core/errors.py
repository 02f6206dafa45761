class StorageError(Exception):
    """Raised when a durable storage read or write fails"""


class CacheConsistencyError(Exception):
    """Raised when a favorites mutation could not be made durable"""


class TokenDecodeError(ValueError):
    """Raised when a session token cannot be decoded"""


class CredentialsError(Exception):
    """Raised when a simulated login is rejected"""
