"""Custom exception classes for the storage server."""


class TagvaultException(Exception):
    """
    Base exception class for all storage-related errors.
    """
    pass


class RecordNotFoundError(TagvaultException):
    """
    Raised when a requested file record does not exist.
    """
    pass


class BlobUnavailableError(TagvaultException):
    """
    Raised when a blob is missing from the blob store or cannot be read/written.
    """
    pass


class MetadataWriteError(TagvaultException):
    """
    Raised when inserting or updating a file record fails.
    """
    pass


class InvalidUploadError(TagvaultException):
    """
    Raised when an upload request carries no usable file.
    """
    pass


class MalformedArchiveError(TagvaultException):
    """
    Raised when a backup archive cannot be read or its manifest cannot be parsed.
    """
    pass


class EmptyManifestError(TagvaultException):
    """
    Raised when a backup archive's manifest holds zero records.
    """
    pass
