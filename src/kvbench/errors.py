# =============================================================================
# Error taxonomy shared by the codec, the connection and the workers.
# =============================================================================


class BenchmarkError(Exception):
    """Base class for everything the benchmark raises on purpose."""


class ProtocolError(BenchmarkError):
    """Malformed or truncated response framing."""


class TransportError(BenchmarkError):
    """Write or read failure on the underlying socket."""


class UnknownOperation(BenchmarkError):

    def __init__(self, name):
        super().__init__(f"unknown cmd name: {name}")
        self.name = name


class ConsistencyViolation(BenchmarkError):
    """A GET returned something other than the value the worker wrote."""

    def __init__(self, key, expected, actual):
        super().__init__(
            f"kv not match: key={key}, expected='{expected}', got='{actual}'"
        )
        self.key = key
        self.expected = expected
        self.actual = actual
