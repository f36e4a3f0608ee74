"""Custom exception classes for chunked transfers."""


class TransferException(Exception):
    """
    Base exception class for all transfer-related errors.
    """
    pass


class TransientNetworkError(TransferException):
    """
    Raised when the storage backend stays unreachable after the client's retries.
    """
    pass


class DataIntegrityError(TransferException):
    """
    Raised when a document cannot be reassembled into valid content.
    """
    pass


class MissingChunksError(DataIntegrityError):
    """
    Raised when fewer chunks are found than the chunk set declares.
    """

    def __init__(self, found: int, expected: int, chunk_set_id: str = ""):
        self.found = found
        self.expected = expected
        self.chunk_set_id = chunk_set_id
        super().__init__(f"Missing chunks: found {found} of {expected}")


class FormatAmbiguityError(DataIntegrityError):
    """
    Raised when chunks fail to decode under the format the length heuristic selected.
    """
    pass


class BlobNotFoundError(DataIntegrityError):
    """
    Raised when the backend has no blob for a requested id.
    """
    pass


class TransferCancelledError(TransferException):
    """
    Raised when a transfer is cancelled at a chunk or batch boundary.
    """
    pass
