"""Exception classes shared by the tracker, the peers and the shell."""


class P2PShareError(Exception):
    """
    Base exception class for all p2pshare errors.
    """
    pass


class ValidationError(P2PShareError):
    """
    Raised when registration input (owner, file list, address) is malformed.

    Always raised before the registry is touched, so a failed call never
    leaves a partially applied change behind.
    """

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message)
        self.code = code


class NotFoundError(P2PShareError):
    """
    Raised when the owning peer does not serve the requested file,
    or when the owner itself is unknown to the tracker.
    """
    pass


class TransferTimeoutError(P2PShareError, TimeoutError):
    """
    Raised when a peer does not answer a transfer request in time.
    """
    pass


class TransferError(P2PShareError):
    """
    Raised when the connection fails while a file is being streamed.
    """
    pass


class NoPortAvailableError(P2PShareError):
    """
    Raised when no free listening port is left in the valid range.
    """
    pass


class ProtocolError(P2PShareError):
    """
    Raised when a transfer request frame cannot be decoded.
    """
    pass


class TrackerUnavailableError(P2PShareError):
    """
    Raised when the tracker cannot be reached after all retries.
    """
    pass
