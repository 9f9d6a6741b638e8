from dataclasses import dataclass

@dataclass(frozen=True)
class PIDGains:
    """Tunable PID parameters, as exposed to tuning files and tools."""
    kp: float = 0.0
    ki: float = 0.0
    kd: float = 0.0
    # Max output (as absolute value)
    max_output: float = 0.0
