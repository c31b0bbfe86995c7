"""
Error taxonomy for the layout engine.

Oracle-side failures are raised by the oracle adapter and the suggestion
ingestor and always caught at the pipeline boundary, where they trigger the
strategy fallback. They never reach API callers.
"""


class LayoutEngineError(Exception):
    """Base class for layout engine errors"""


class OracleUnavailable(LayoutEngineError):
    """No oracle configured, no credential, or the call itself failed"""


class OracleResponseError(LayoutEngineError):
    """The oracle answered but the answer can't be used"""


class OracleMalformed(OracleResponseError):
    """Response text has no parseable payload of the expected shape"""


class CardinalityMismatch(OracleResponseError):
    """Every suggested layout had a different region count than the existing set"""

    def __init__(self, expected: int, received: list):
        self.expected = expected
        self.received = received
        super().__init__(f"expected {expected} regions per suggestion, got {received}")
