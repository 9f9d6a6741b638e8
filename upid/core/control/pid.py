import math
from ...logger import get_logger
from ..models import PIDGains

logger = get_logger(__name__)


def clamp(value, low, high):
    return max(low, min(value, high))


def _is_degenerate(variant, error, dt=None):
    """NaN error, or a zero time step when one is given."""
    if math.isnan(error) or dt == 0.0:
        logger.debug("DegenerateInput", {"variant": variant, "error": error, "dt": dt})
        return True
    return False


class PIDController:
    """
    Discrete-time PID Controller, stepped once per control tick.

    Output is clamped symmetrically to [-max_output, max_output].
    Invalid input (dt == 0 or NaN error) returns 0.0 and leaves state untouched.
    Not thread safe: one instance per control thread.
    """
    def __init__(self, kp, ki, kd, max_output):
        self.configure(kp, ki, kd, max_output)
        self.reset()

    @classmethod
    def from_gains(cls, gains: PIDGains) -> "PIDController":
        return cls(gains.kp, gains.ki, gains.kd, gains.max_output)

    @property
    def gains(self) -> PIDGains:
        return PIDGains(self.kp, self.ki, self.kd, self.max_output)

    def configure(self, kp, ki, kd, max_output):
        """Replace gains and output limit. Error history is kept."""
        if math.isnan(max_output) or max_output < 0.0:
            raise ValueError(f"max_output must be non-negative, got {max_output}")
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.max_output = max_output

    def reset(self):
        self.prev_error = 0.0
        self.integral = 0.0

    def _clamp(self, output):
        return clamp(output, -self.max_output, self.max_output)

    def update(self, error: float, dt: float) -> float:
        """
        Calculate the full PID output.
        error: Target - Measured
        dt: Time delta in seconds since the previous call
        """
        if _is_degenerate("pid", error, dt):
            return 0.0

        # P Term
        p_term = self.kp * error

        # I Term
        self.integral += dt * error
        i_term = self.ki * self.integral

        # D Term
        d_error = (error - self.prev_error) / dt
        d_term = self.kd * d_error

        self.prev_error = error

        return self._clamp(p_term + i_term + d_term)

    def update_as_pid(self, error: float, dt: float) -> float:
        return self.update(error, dt)

    def update_as_p(self, error: float) -> float:
        """Proportional only. Stateless: history is neither read nor written."""
        if _is_degenerate("p", error):
            return 0.0
        return self._clamp(self.kp * error)

    def update_as_pd(self, error: float, dt: float) -> float:
        """Proportional + Derivative. Advances prev_error, leaves the integral alone."""
        if _is_degenerate("pd", error, dt):
            return 0.0

        p_term = self.kp * error

        d_error = (error - self.prev_error) / dt
        d_term = self.kd * d_error

        self.prev_error = error

        return self._clamp(p_term + d_term)

    def update_as_pi(self, error: float, dt: float) -> float:
        """Proportional + Integral. Accumulates the integral, leaves prev_error alone."""
        if _is_degenerate("pi", error, dt):
            return 0.0

        p_term = self.kp * error

        self.integral += dt * error
        i_term = self.ki * self.integral

        return self._clamp(p_term + i_term)
