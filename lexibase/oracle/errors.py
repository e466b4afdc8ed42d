"""Errors raised by sentence analysis oracles."""


class OracleError(RuntimeError):
    """Base class for failures talking to an analysis oracle."""


class OracleUnavailableError(OracleError):
    """The oracle could not be reached or kept failing; safe to retry later."""


class OracleResponseError(OracleError):
    """The oracle answered but the reply was empty or did not match the schema."""


__all__ = ["OracleError", "OracleResponseError", "OracleUnavailableError"]
