"""Single-assignment cell carrying the job id from submitter to poller."""

import threading

from .exceptions import JobSubmissionError


class JobIdCell:
    """Holds the job id once submission finishes, or the submission failure.

    Written exactly once by the submission thread and read on every poll
    tick. Readers never block; ``get`` returns None until the id is known.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._job_id: str | None = None
        self._error: JobSubmissionError | None = None

    def set(self, job_id: str) -> None:
        if not job_id:
            raise ValueError("job id must not be empty")
        with self._lock:
            self._ensure_unset()
            self._job_id = job_id
            self._done.set()

    def fail(self, error: JobSubmissionError) -> None:
        with self._lock:
            self._ensure_unset()
            self._error = error
            self._done.set()

    def get(self) -> str | None:
        """Return the job id, or None while submission is pending.

        Raises:
            JobSubmissionError: If submission failed
        """
        if self._error is not None:
            raise self._error
        return self._job_id

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the cell is resolved; returns False on timeout."""
        return self._done.wait(timeout)

    @property
    def is_set(self) -> bool:
        return self._done.is_set()

    def _ensure_unset(self) -> None:
        if self._done.is_set():
            raise RuntimeError("job id cell is already resolved")
