"""Upload progress reporting with a lazily created tqdm bar."""

import threading
from typing import Any, Callable

from tqdm import tqdm


class UploadProgress:
    """Transfer callback that renders upload progress.

    boto3 invokes the callback from its transfer threads with the number of
    bytes sent since the previous call. The bar is only created on the first
    event, when the transfer is actually under way.
    """

    def __init__(
        self,
        total_bytes: int | None = None,
        description: str = "Uploading",
        bar_factory: Callable[..., Any] = tqdm,
    ) -> None:
        self._total_bytes = total_bytes
        self._description = description
        self._bar_factory = bar_factory
        self._bar: Any = None
        self._transferred = 0
        self._lock = threading.Lock()

    @property
    def transferred(self) -> int:
        return self._transferred

    @property
    def started(self) -> bool:
        return self._bar is not None

    def __call__(self, bytes_amount: int) -> None:
        with self._lock:
            if self._bar is None:
                self._bar = self._bar_factory(
                    total=self._total_bytes,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc=self._description,
                )
            self._transferred += bytes_amount
            self._bar.update(bytes_amount)

    def close(self) -> None:
        with self._lock:
            if self._bar is not None:
                self._bar.close()
