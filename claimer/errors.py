class FormatError(Exception):
    """Raise if a proof file or seed input is malformed or contains duplicates"""

    pass


class RemoteRejection(Exception):
    """
    Raise if the remote contract explicitly refused a call.
    :param `reason`: normalized reason, eg: `already-claimed`, `invalid-proof`
    """

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason

    @property
    def already_done(self) -> bool:
        return self.reason in ("already-claimed", "already-registered")


class TransportFailure(Exception):
    """Raise if a remote call could not be completed (network error, timeout)"""

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason


class FatalInfrastructureError(Exception):
    """Raise if the remote service cannot be used at all for the run"""

    pass


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass
