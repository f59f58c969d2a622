"""Custom exception classes for ShareLine."""


class ShareLineException(Exception):
    """
    Base exception class for all ShareLine errors.
    """
    pass


class InvalidInputError(ShareLineException):
    """
    Raised for an empty file name, illegal characters in a name or storage key,
    or a non-positive share expiration.
    """
    pass


class AuthenticationRequiredError(ShareLineException):
    """
    Raised when no verified identity accompanies a private operation.
    """
    pass


class NotFoundError(ShareLineException):
    """
    Raised when a file does not exist, is not owned by the requester,
    or a share token is unknown or expired. The three cases are deliberately
    indistinguishable.
    """
    pass


class StorageFailureError(ShareLineException):
    """
    Raised when the content medium or the metadata store fails an I/O operation.
    """
    pass


class ConflictError(ShareLineException):
    """
    Raised when an insert violates a uniqueness constraint.
    """
    pass
