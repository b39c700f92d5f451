from container_health.domain.container import UsageFigures, UsageSnapshot

ZERO_PERCENT = "0%"
ZERO_MEGABYTES = "0 MB"

_BYTES_PER_MB = 1024 * 1024


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def format_megabytes(value: float) -> str:
    return f"{value:.2f} MB"


def cpu_percent(snapshot: UsageSnapshot) -> float:
    """
    Share of the host's CPU time used by the container between the two
    readings, scaled by the number of online CPUs (400% max on 4 CPUs).
    """
    cpu_delta = snapshot.container_cpu - snapshot.previous_container_cpu
    system_delta = snapshot.system_cpu - snapshot.previous_system_cpu
    online_cpus = max(snapshot.online_cpus, 1)

    if system_delta <= 0:
        return 0.0
    # a counter reset yields a negative delta
    return round(max(cpu_delta / system_delta * online_cpus * 100, 0.0), 2)


def memory_percent(usage: int, limit: int) -> float:
    if limit <= 0:
        return 0.0
    return round(min(max(usage / limit * 100, 0.0), 100.0), 2)


class UsageStatsCalculator:
    def compute(self, snapshot: UsageSnapshot) -> UsageFigures:
        return UsageFigures(
            cpu_percent=cpu_percent(snapshot),
            memory_percent=memory_percent(snapshot.memory_usage, snapshot.memory_limit),
            memory_usage_mb=snapshot.memory_usage / _BYTES_PER_MB,
            memory_limit_mb=snapshot.memory_limit / _BYTES_PER_MB,
            memory_available=snapshot.memory_limit > 0,
        )

    def format(self, figures: UsageFigures) -> dict:
        """Render figures the way the dashboard shows them."""
        return {
            "cpu_percent": format_percent(figures.cpu_percent),
            "memory_usage": format_megabytes(figures.memory_usage_mb),
            "memory_limit": format_megabytes(figures.memory_limit_mb),
            "memory_percent": (
                format_percent(figures.memory_percent)
                if figures.memory_available
                else ZERO_PERCENT
            ),
        }

    def format_unavailable(self) -> dict:
        return {
            "cpu_percent": ZERO_PERCENT,
            "memory_usage": ZERO_MEGABYTES,
            "memory_limit": ZERO_MEGABYTES,
            "memory_percent": ZERO_PERCENT,
        }
