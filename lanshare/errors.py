"""Exception taxonomy for lanshare.

Parse problems and relay problems never surface as exceptions: the record
store recovers to an empty Database and the forwarder returns an outcome.
"""


class LanshareError(RuntimeError):
    """Base error for blocking lanshare failures."""


class SelectionCancelled(Exception):
    """The user aborted the file picker. Not an error for status purposes."""


class SelectionFailed(LanshareError):
    """A capability could not be obtained for the chosen file."""


class WriteFailure(LanshareError):
    """An append could not be durably completed; prior state is untouched."""


class InvalidCapability(WriteFailure):
    """The capability is missing, released or revoked."""


class InvalidRecord(WriteFailure):
    """The submitted value is not a well-formed Record."""


class SessionBusy(LanshareError):
    """A pick or submit is already in progress for this session."""


class ConfigError(LanshareError):
    """Environment configuration could not be parsed."""
