import re
from typing import Iterable, Optional, Sequence

from container_health.domain.container import ContainerHealth, HealthState, LogWindow

# Matched against the lower-cased last log line.
ERROR_TOKENS: Sequence[str] = (
    "working in port",
    "erro",
    "error",
    "fail",
    "exception",
    "qrreaderror",
)

NOT_STARTED_LABEL = "not started"


class StateFusionEngine:
    """
    Combine the engine's lifecycle state with what the last log line says.

    The engine only knows whether the process is alive. The log heuristic
    catches applications that are alive but broken:

    * the last non-blank line contains an error token -> ERROR, not running;
    * there is no log line at all -> not running while ``fail_closed`` is set
      (a container that never logged has not proven it works);
    * a not-started marker anywhere in the tail forces the "not started" label.
    """

    def __init__(
        self,
        *,
        fail_closed: bool = True,
        not_started_markers: Iterable[str] = (),
        error_tokens: Sequence[str] = ERROR_TOKENS,
    ):
        self.fail_closed = fail_closed
        self.not_started_markers = tuple(m.lower() for m in not_started_markers if m)
        self._error_pattern = re.compile("|".join(re.escape(t.lower()) for t in error_tokens))

    def detect_error(self, line: Optional[str]) -> Optional[str]:
        """Return the line itself when it carries an error token."""
        if line and self._error_pattern.search(line.lower()):
            return line
        return None

    def has_not_started_marker(self, window: LogWindow) -> bool:
        if not self.not_started_markers:
            return False
        return any(
            marker in line.lower()
            for line in window.lines
            for marker in self.not_started_markers
        )

    def fuse(
        self,
        engine_running: bool,
        window: LogWindow,
        engine_status: Optional[str] = None,
    ) -> ContainerHealth:
        last_line = window.last_line
        error_message = self.detect_error(last_line)

        if last_line is None:
            log_healthy = not self.fail_closed
        else:
            log_healthy = error_message is None

        running = engine_running and log_healthy
        status_label = engine_status

        if error_message is not None:
            state = HealthState.ERROR
        elif running:
            state = HealthState.RUNNING
        elif not engine_running:
            state = HealthState.STOPPED
        else:
            state = HealthState.UNKNOWN

        if self.has_not_started_marker(window):
            status_label = NOT_STARTED_LABEL
            if state is not HealthState.ERROR:
                state = HealthState.NOT_STARTED

        return ContainerHealth(
            state=state,
            running=running,
            error_message=error_message,
            status_label=status_label,
        )
