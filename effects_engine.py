"""
Color Effects Engine - Effect sink for step sequences
Leaf actions call apply_effect(); the current color is pushed to the UI over SocketIO.
"""
import threading
import time
import logging

import core_registry as reg

logger = logging.getLogger(__name__)


class ColorEffectsEngine:
    """Applies a labelled color effect for a sequence index.

    Synchronous and side-effecting; return value is always None so callers
    never depend on it.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.current_color = None
        self.current_index = None
        self.applied_count = 0
        self.last_applied = None  # time.time() of last effect

    def apply_effect(self, label, index):
        """Set the displayed color for iteration `index`"""
        with self.lock:
            self.current_color = label
            self.current_index = index
            self.applied_count += 1
            self.last_applied = time.time()
        logger.info(f"Setting {label} {index}")
        if reg.socketio:
            reg.socketio.emit('effect_applied', {'color': label, 'index': index})

    def get_status(self):
        """Get current effect status for diagnostics"""
        with self.lock:
            return {
                'color': self.current_color,
                'index': self.current_index,
                'applied_count': self.applied_count,
                'last_applied': self.last_applied,
            }
