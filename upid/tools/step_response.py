#!/usr/bin/env python3
import argparse
import dataclasses
import numpy as np
from ..config import load_config
from ..logger import setup_logging, get_logger
from ..core.control.pid import PIDController
from ..core.control.logger import CSVTelemetryLogger
from ..core.simulation.plant import FirstOrderPlant

MODES = ("p", "pd", "pi", "pid")

def _select_update(controller, mode):
    if mode == "p":
        return lambda error, dt: controller.update_as_p(error)
    if mode == "pd":
        return controller.update_as_pd
    if mode == "pi":
        return controller.update_as_pi
    if mode == "pid":
        return controller.update_as_pid
    raise ValueError(f"Unknown mode '{mode}', expected one of {MODES}")

def simulate(controller, plant, setpoint, dt, steps, mode="pid", telemetry=None):
    """
    Run a closed loop of `steps` ticks against `plant`.

    Returns a dict of numpy arrays: time, setpoint, measurement, error, output.
    The plant output before each tick is the measurement the controller sees.
    """
    update = _select_update(controller, mode)

    times = np.arange(steps) * dt
    measurements = np.zeros(steps)
    errors = np.zeros(steps)
    outputs = np.zeros(steps)

    y = plant.value
    for k in range(steps):
        error = setpoint - y
        u = update(error, dt)

        measurements[k] = y
        errors[k] = error
        outputs[k] = u

        if telemetry is not None:
            telemetry.log(setpoint=float(setpoint), measurement=float(y), error=float(error), output=float(u))

        y = plant.step(u, dt)

    return {
        "time": times,
        "setpoint": np.full(steps, float(setpoint)),
        "measurement": measurements,
        "error": errors,
        "output": outputs,
    }

def summarize(result):
    """Final error, peak |output| and fractional overshoot of a simulate() result."""
    setpoint = result["setpoint"][0] if len(result["setpoint"]) else 0.0
    if len(result["measurement"]) == 0:
        return {"final_error": 0.0, "peak_output": 0.0, "overshoot": 0.0}

    overshoot = 0.0
    if setpoint != 0.0:
        # Measured in the direction of the step
        peak = np.max(np.sign(setpoint) * result["measurement"])
        overshoot = max(0.0, (peak - abs(setpoint)) / abs(setpoint))

    return {
        "final_error": float(result["error"][-1]),
        "peak_output": float(np.max(np.abs(result["output"]))),
        "overshoot": float(overshoot),
    }

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a PID step response against a simulated first-order plant.")
    parser.add_argument("--config", default="tuning.json", help="Path to the JSON tuning file (default tuning.json)")
    parser.add_argument("--kp", type=float, default=None, help="Override proportional gain")
    parser.add_argument("--ki", type=float, default=None, help="Override integral gain")
    parser.add_argument("--kd", type=float, default=None, help="Override derivative gain")
    parser.add_argument("--max-output", type=float, default=None, help="Override output limit (absolute value)")
    parser.add_argument("--mode", choices=MODES, default="pid", help="Controller variant to drive (default pid)")
    parser.add_argument("--setpoint", type=float, default=1.0, help="Step target (default 1.0)")
    parser.add_argument("--dt", type=float, default=0.02, help="Tick period in seconds (default 0.02)")
    parser.add_argument("--steps", type=int, default=500, help="Number of ticks (default 500)")
    parser.add_argument("--plant-gain", type=float, default=1.0, help="Plant static gain (default 1.0)")
    parser.add_argument("--time-constant", type=float, default=0.5, help="Plant time constant in seconds (default 0.5)")
    parser.add_argument("--csv", default="pid_telemetry.csv", help="Telemetry output path (default pid_telemetry.csv)")
    parser.add_argument("--session", default=None, help="Session ID for the log filename (logs/session_<id>.jsonl)")
    parser.add_argument("--log-file", default=None, help="JSONL log path, overrides --session (default logs/session_<timestamp>.jsonl)")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug output.")
    return parser.parse_args(argv)

def main(argv=None):
    args = parse_args(argv)
    setup_logging(session_id=args.session, log_file=args.log_file, verbose=args.verbose)
    logger = get_logger("StepResponse")

    gains = load_config(args.config).gains
    overrides = {
        name: value for name, value in (
            ("kp", args.kp), ("ki", args.ki), ("kd", args.kd), ("max_output", args.max_output)
        ) if value is not None
    }
    gains = dataclasses.replace(gains, **overrides)

    controller = PIDController.from_gains(gains)
    plant = FirstOrderPlant(gain=args.plant_gain, time_constant=args.time_constant)
    logger.info("StepResponseStarted", {"mode": args.mode, **dataclasses.asdict(gains)})

    with CSVTelemetryLogger(args.csv) as telemetry:
        result = simulate(controller, plant, args.setpoint, args.dt, args.steps, args.mode, telemetry)

    summary = summarize(result)
    logger.info("StepResponseComplete", {"csv": args.csv, **summary})

    print(f"--- Step Response ({args.mode.upper()}) ---")
    print(f"Gains: kp={gains.kp} ki={gains.ki} kd={gains.kd} max_output={gains.max_output}")
    print(f"Final error:  {summary['final_error']:.4f}")
    print(f"Peak output:  {summary['peak_output']:.4f}")
    print(f"Overshoot:    {summary['overshoot'] * 100:.1f}%")
    print(f"Telemetry written to {args.csv}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
