import matplotlib
import matplotlib.pyplot as plt
import csv
import sys
import os

def read_telemetry(filename):
    """Read a telemetry CSV written by CSVTelemetryLogger into lists keyed by column."""
    columns = ("time", "setpoint", "measurement", "error", "output")
    data = {name: [] for name in columns}

    with open(filename, 'r', newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                values = {name: float(row[name]) for name in columns}
            except (KeyError, TypeError, ValueError):
                continue
            for name, value in values.items():
                data[name].append(value)
    return data

def plot_logs(filename="pid_telemetry.csv", output_filename="step_response.png"):
    if not os.path.exists(filename):
        print(f"Error: {filename} not found.")
        return None

    data = read_telemetry(filename)
    if not data["time"]:
        print("No valid data found.")
        return None

    # Normalize time
    start_time = data["time"][0]
    times = [t - start_time for t in data["time"]]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    # Subplot 1: Tracking
    ax1.set_title("Step Response: Setpoint vs Measurement")
    ax1.plot(times, data["setpoint"], 'k--', label="Setpoint", linewidth=1)
    ax1.plot(times, data["measurement"], 'b-', label="Measurement", linewidth=1.5)
    ax1.set_ylabel("Process Value")
    ax1.legend()
    ax1.grid(True)

    # Subplot 2: PID Error & Output
    ax2.set_title("Control Loop: Error vs Output")
    ax2.plot(times, data["error"], 'r-', label="Error", alpha=0.7)
    ax2.plot(times, data["output"], 'g-', label="PID Output", alpha=0.7)
    ax2.set_ylabel("Value")
    ax2.set_xlabel("Time (s)")
    ax2.axhline(0, color='black', linewidth=1)
    ax2.legend()
    ax2.grid(True)

    plt.tight_layout()
    plt.savefig(output_filename)
    plt.close(fig)
    print(f"Plot saved to {output_filename}")
    return output_filename

if __name__ == "__main__":
    matplotlib.use("Agg")
    plot_logs(*sys.argv[1:3])
