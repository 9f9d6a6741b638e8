# Configuration loading (PID tuning)
import json
from .logger import get_logger
from .core.models import PIDGains

logger = get_logger(__name__)

def load_tuning(file_path="tuning.json"):
    """Load a tuning document from a JSON file."""
    try:
        with open(file_path, "r") as f:
            tuning = json.load(f)
        logger.info("TuningLoaded", {"path": file_path})
        return tuning
    except (OSError, json.JSONDecodeError) as e:
        logger.error("TuningLoadFailed", {"path": file_path, "error": str(e)})
        return {}

def gains_from_tuning(tuning):
    """Build PIDGains from the 'pid' section of a tuning document. Missing keys default to 0."""
    p = tuning.get("pid", {})
    return PIDGains(
        kp=float(p.get("kp", 0.0)),
        ki=float(p.get("ki", 0.0)),
        kd=float(p.get("kd", 0.0)),
        max_output=float(p.get("max_output", 0.0)),
    )

class Config:
    """A class to hold the controller configuration."""
    def __init__(self, tuning_path="tuning.json"):
        self.tuning = load_tuning(tuning_path)
        self.gains = gains_from_tuning(self.tuning)

def load_config(tuning_path="tuning.json"):
    """Load all configurations."""
    return Config(tuning_path)
