import csv
import time

class CSVTelemetryLogger:
    """Records one CSV row per control tick. The header comes from the first call's fields."""
    def __init__(self, filename="pid_telemetry.csv"):
        self.filename = filename
        self.file = None
        self.writer = None
        self.start_time = time.time()
        self.enabled = True

    def log(self, **kwargs):
        if not self.enabled:
            return

        if self.file is None:
            self.file = open(self.filename, "w", newline='')
            self.writer = csv.writer(self.file)
            self.writer.writerow(["time"] + list(kwargs.keys()))

        t = time.time() - self.start_time
        row = [f"{t:.4f}"] + [f"{v:.4f}" if isinstance(v, float) else v for v in kwargs.values()]
        self.writer.writerow(row)
        self.file.flush()

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
