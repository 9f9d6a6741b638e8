import logging
import json
import math
import datetime
import sys
import os

# Marks handlers installed by setup_logging, so re-initialising only closes our own
_OWNED_ATTR = "_upid_owned"

def _finite_only(value):
    """NaN/inf are not valid JSON; render them as strings ('nan', 'inf', '-inf')."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _finite_only(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite_only(v) for v in value]
    return value

class JSONFormatter(logging.Formatter):
    """
    One JSON object per record: timestamp, level, component, event, data.
    The message is the event name; a dict argument becomes the data payload.
    """
    def format(self, record):
        log_record = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "event": record.msg,
            "data": _finite_only(record.args) if isinstance(record.args, dict) else {}
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str, allow_nan=False)

def session_log_path(session_id=None, log_dir="logs"):
    """logs/session_<id>.jsonl, or logs/session_<YYYY-MM-DD_HH-MM-SS>.jsonl without an id."""
    if not session_id:
        session_id = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    return os.path.join(log_dir, f"session_{session_id}.jsonl")

def setup_logging(session_id=None, log_file=None, verbose=False, log_dir="logs"):
    """
    Route the root logger to a JSONL file and to stdout.

    Args:
        session_id (str): Tag for the log filename (e.g. 'bench01'). A timestamp when None.
        log_file (str): Explicit JSONL path; takes precedence over session naming.
        verbose (bool): DEBUG everywhere instead of INFO to file and WARNING to console.
        log_dir (str): Directory for session-named files.

    Returns:
        str: Path of the JSONL log file.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Detach everything; close only what an earlier call installed
    for handler in root_logger.handlers:
        if getattr(handler, _OWNED_ATTR, False):
            handler.close()
    root_logger.handlers = []

    if log_file is None:
        log_file = session_log_path(session_id, log_dir)
    if os.path.dirname(log_file):
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(JSONFormatter())
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'))
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in (file_handler, console_handler):
        setattr(handler, _OWNED_ATTR, True)
        root_logger.addHandler(handler)

    # matplotlib is chatty at DEBUG (font cache scans)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)

    logging.info("LoggingInitialized", {"log_file": log_file})
    return log_file

def get_logger(name):
    return logging.getLogger(name)
