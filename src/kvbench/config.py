from dataclasses import dataclass
from typing import Optional

from kvbench.client import DEFAULT_PORT

# --- Defaults ---
DEFAULT_TYPE = "tcp"
DEFAULT_HOST = "localhost"
DEFAULT_TOTAL = 1000
DEFAULT_VALUE_SIZE = 1000
DEFAULT_THREADS = 1
DEFAULT_OPERATION = "set"
DEFAULT_KEY_SPACE = 0
DEFAULT_PIPELINE = 1

MIXED = "mixed"
OPERATIONS = ("get", "set", MIXED)


@dataclass(frozen=True)
class BenchConfig:
    """
    Everything a run needs, built once and handed to the driver and each worker.

    operation is not checked against OPERATIONS here; the CLI restricts it and
    the workers decide what an unknown name means on each dispatch path.
    """
    client_type: str = DEFAULT_TYPE
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    total: int = DEFAULT_TOTAL
    value_size: int = DEFAULT_VALUE_SIZE
    threads: int = DEFAULT_THREADS
    operation: str = DEFAULT_OPERATION
    key_space: int = DEFAULT_KEY_SPACE
    pipeline: int = DEFAULT_PIPELINE
    timeout: Optional[float] = None
    seed: Optional[int] = None

    def __post_init__(self):
        if self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
        if self.total < 0:
            raise ValueError(f"total must be >= 0, got {self.total}")
        if self.value_size < 0:
            raise ValueError(f"value_size must be >= 0, got {self.value_size}")
        if self.key_space < 0:
            raise ValueError(f"key_space must be >= 0, got {self.key_space}")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def per_worker(self):
        return self.total // self.threads

    def banner(self):
        return [
            "--- Client Configuration ---",
            f"[cli-type]: {self.client_type}",
            f"[target-server]: {self.host}:{self.port}",
            f"[total-req]: {self.total}",
            f"[data-size]: {self.value_size}",
            f"[conn-threads]: {self.threads}",
            f"[operation]: {self.operation}",
            f"[key-space-len]: {self.key_space}",
            f"[pipeline]: {self.pipeline}",
            "----------------------------",
        ]
