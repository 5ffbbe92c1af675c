import logging
import sys


def configure_logging(level="INFO", stream=None):
    root = logging.getLogger()
    root.setLevel(level if isinstance(level, int) else str(level).upper())

    # one handler per process, replaced on reconfigure
    for old in [h for h in root.handlers if getattr(h, "_break_layout", False)]:
        root.removeHandler(old)

    # stderr by default so JSON on stdout stays clean
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
    ))
    handler._break_layout = True
    root.addHandler(handler)
