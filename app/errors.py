# app/errors.py


class MentorBridgeError(Exception):
    """Base class for errors raised by the typing coach."""


class StorageError(MentorBridgeError):
    """The key-value store could not be read or written."""


class DatabaseError(StorageError):
    pass


class FeedbackError(MentorBridgeError):
    """The coaching feedback request failed or returned nothing usable."""


class ConfigurationError(MentorBridgeError):
    pass
