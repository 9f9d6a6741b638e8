class FirstOrderPlant:
    """
    First-order lag used to exercise a controller offline.
    y[k+1] = y[k] + dt * (gain * u - y[k]) / time_constant
    """
    def __init__(self, gain: float = 1.0, time_constant: float = 1.0, initial: float = 0.0):
        if time_constant <= 0.0:
            raise ValueError(f"time_constant must be positive, got {time_constant}")
        self.gain = gain
        self.time_constant = time_constant
        self.initial = initial
        self.value = initial

    def reset(self):
        self.value = self.initial

    def step(self, u: float, dt: float) -> float:
        self.value += dt * (self.gain * u - self.value) / self.time_constant
        return self.value
