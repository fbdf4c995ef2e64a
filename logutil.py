import os
import logging
import threading
import config

logger = logging.getLogger('minepy_world')

_tick_id = None

# Scopes that can be silenced through a config toggle.
_SCOPE_TOGGLES = {
    'STREAM': 'LOG_STREAMING',
    'MAPGEN': 'LOG_GENERATION',
    'LIGHT': 'LOG_LIGHTING',
}

_LEVEL_COLORS = {
    'WARNING': '\x1b[33m',
    'ERROR': '\x1b[31m',
}


def set_tick(tick_id):
    global _tick_id
    _tick_id = tick_id


def log(scope, msg, level="INFO"):
    toggle = _SCOPE_TOGGLES.get(scope)
    if toggle is not None and level in ("DEBUG", "INFO") and not getattr(config, toggle, True):
        return
    thread = threading.current_thread().name
    tick = _tick_id
    tick_tag = f" t{tick}" if tick is not None else ""
    text = f"[{level}{tick_tag} thr{thread} {scope}] {msg}"
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    color = _LEVEL_COLORS.get(level)
    if use_color and color is not None:
        text = f"{color}{text}\x1b[0m"
    logger.log(getattr(logging, level, logging.INFO), text)
