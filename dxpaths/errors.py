"""Exception types shared across the DX paths package.

None of these are fatal: locator and report errors are recovered where they
occur, fetch failures are surfaced through the scheduler status while the
previously retained spots stay in place.
"""


class LocatorError(ValueError):
    """A Maidenhead locator could not be decoded."""


class MalformedReport(ValueError):
    """A raw spot record is missing identity fields or has unparseable values."""


class FetchFailure(ConnectionError):
    """A reporting network could not be reached or returned an unusable payload."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
