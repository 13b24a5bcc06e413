"""
kvbench - load generator for the length-prefixed key-value protocol.
"""

from kvbench.client import Request, Response, TcpClient, new_client
from kvbench.config import BenchConfig
from kvbench.driver import run_benchmark
from kvbench.errors import (
    BenchmarkError,
    ConsistencyViolation,
    ProtocolError,
    TransportError,
    UnknownOperation,
)
from kvbench.result import Result

__version__ = "0.1.0"
