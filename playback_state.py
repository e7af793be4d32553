"""
Stepper Playback State - Tracks the running sequence for status and UI updates

Subscribes to Sequencer events and keeps only the latest iteration in memory.
Uses core_registry for the SocketIO reference.
"""

import threading
import logging
from datetime import datetime
import core_registry as reg

logger = logging.getLogger(__name__)


class PlaybackManager:
    """Observes a Sequencer: current index, last result, run outcome"""
    def __init__(self):
        self.lock = threading.Lock()
        self.current = {'index': None, 'last_result': None, 'state': 'idle', 'started': None, 'error': None}

    def attach(self, sequencer):
        """Register on the sequencer's events"""
        sequencer.on('iteration_started', self.iteration_started)
        sequencer.on('iteration_complete', self.iteration_complete)
        sequencer.on('run_complete', self.run_complete)
        sequencer.on('run_error', self.run_error)

    def iteration_started(self, index):
        with self.lock:
            if self.current['state'] != 'running':
                self.current['started'] = datetime.now().isoformat()
            self.current['state'] = 'running'
            self.current['index'] = index
        self._emit()

    def iteration_complete(self, index, result):
        if result is not None:
            logger.debug(f"Iteration {index} returned {result!r}")
        with self.lock:
            self.current['index'] = index
            self.current['last_result'] = _jsonable(result)
        self._emit()

    def run_complete(self, count):
        with self.lock:
            self.current['state'] = 'finished'
        logger.info(f"Sequence finished after {count} iterations")
        self._emit()

    def run_error(self, index, error):
        with self.lock:
            self.current['state'] = 'error'
            self.current['error'] = f"{type(error).__name__}: {error}"
        self._emit()

    def _emit(self):
        if reg.socketio:
            reg.socketio.emit('playback_update', self.get_status())

    def get_status(self):
        with self.lock:
            return dict(self.current)


def _jsonable(value):
    """Tuples become lists, anything unknown becomes its repr"""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return repr(value)
