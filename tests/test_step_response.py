import sys
import os
import csv
import json
import logging
import tempfile
import unittest
from unittest.mock import patch
import numpy as np

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from upid.core.control.pid import PIDController
from upid.core.simulation.plant import FirstOrderPlant
from upid.tools.step_response import simulate, summarize, main

class TestSimulate(unittest.TestCase):
    def test_pid_tracks_step(self):
        pid = PIDController(kp=1.2, ki=0.8, kd=0.05, max_output=2.0)
        plant = FirstOrderPlant(gain=0.8, time_constant=0.5)
        result = simulate(pid, plant, setpoint=1.0, dt=0.02, steps=1000)

        self.assertEqual(result["output"].shape, (1000,))
        self.assertGreater(abs(result["error"][0]), abs(result["error"][-1]))
        self.assertLess(abs(result["error"][-1]), 0.05)
        self.assertLessEqual(np.max(np.abs(result["output"])), 2.0)

    def test_p_only_leaves_steady_state_offset(self):
        pid = PIDController(kp=1.0, ki=0.0, kd=0.0, max_output=10.0)
        plant = FirstOrderPlant(gain=1.0, time_constant=0.2)
        result = simulate(pid, plant, setpoint=1.0, dt=0.01, steps=500, mode="p")
        # Closed loop settles at kp / (1 + kp) = 0.5
        self.assertAlmostEqual(result["measurement"][-1], 0.5, places=3)
        self.assertEqual(pid.prev_error, 0.0)
        self.assertEqual(pid.integral, 0.0)

    def test_unknown_mode(self):
        pid = PIDController(1.0, 0.0, 0.0, 1.0)
        with self.assertRaises(ValueError):
            simulate(pid, FirstOrderPlant(), 1.0, 0.01, 10, mode="pdq")

    def test_summary(self):
        result = {
            "time": np.array([0.0, 0.1, 0.2]),
            "setpoint": np.full(3, 2.0),
            "measurement": np.array([0.0, 2.5, 2.0]),
            "error": np.array([2.0, -0.5, 0.0]),
            "output": np.array([1.0, -3.0, 0.2]),
        }
        summary = summarize(result)
        self.assertEqual(summary["final_error"], 0.0)
        self.assertEqual(summary["peak_output"], 3.0)
        self.assertAlmostEqual(summary["overshoot"], 0.25)


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        root = logging.getLogger()
        self._saved = (root.level, list(root.handlers))

    def tearDown(self):
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.setLevel(self._saved[0])
        root.handlers = self._saved[1]
        self.tmpdir.cleanup()

    def test_cli_writes_telemetry_and_summary(self):
        tuning = os.path.join(self.tmpdir.name, "tuning.json")
        with open(tuning, "w") as f:
            json.dump({"pid": {"kp": 1.0, "ki": 0.5, "kd": 0.0, "max_output": 5.0}}, f)
        csv_path = os.path.join(self.tmpdir.name, "out.csv")
        log_path = os.path.join(self.tmpdir.name, "run.jsonl")

        with patch("builtins.print"):
            code = main([
                "--config", tuning, "--kd", "0.01", "--steps", "50",
                "--csv", csv_path, "--log-file", log_path,
            ])
        self.assertEqual(code, 0)

        with open(csv_path, newline='') as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ["time", "setpoint", "measurement", "error", "output"])
        self.assertEqual(len(rows), 51)

        with open(log_path) as f:
            events = {json.loads(line)["event"]: json.loads(line) for line in f}
        self.assertEqual(events["StepResponseStarted"]["data"]["kd"], 0.01)
        self.assertEqual(events["StepResponseStarted"]["data"]["kp"], 1.0)
        self.assertIn("overshoot", events["StepResponseComplete"]["data"])

    def test_cli_session_names_log_file(self):
        cwd = os.getcwd()
        os.chdir(self.tmpdir.name)
        self.addCleanup(os.chdir, cwd)

        with patch("builtins.print"):
            code = main(["--config", "missing.json", "--kp", "1.0", "--max-output", "2.0",
                         "--steps", "5", "--csv", "out.csv", "--session", "bench01"])
        self.assertEqual(code, 0)
        self.assertTrue(os.path.exists(os.path.join("logs", "session_bench01.jsonl")))

if __name__ == "__main__":
    unittest.main()
