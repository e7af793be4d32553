#!/usr/bin/env python3
"""
Stepper Core v0.1 - Pausable step sequence host

Runs the demo step sequence on a background asyncio loop and exposes the
control surface over HTTP and WebSocket.

Features:
- Sequencer on its own event loop thread (one logical task, no fan-out)
- Pause / play / ffwd / toggle / single-step via /api/playback/*
- Live color + result updates over SocketIO (effect_applied, playback_update)
- Control changes reach steps already waiting, within one check interval
"""

import asyncio
import logging
import os
import threading

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO, emit

import core_registry as reg
from core.stepper import ControlState, ControlSurface, Sequencer, StepperConfig
from effects_engine import ColorEffectsEngine
from playback_state import PlaybackManager
from step_sequences import build_demo_sequence
from blueprints.playback_bp import playback_bp, init_app as playback_init

STEPPER_VERSION = "0.1.0"
API_PORT = int(os.environ.get('STEPPER_API_PORT', 8891))

# ============================================================
# CORS Configuration
# ============================================================
# Add custom origins via STEPPER_CORS_ORIGINS environment variable (comma-separated)
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8891",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8891",
]


def get_allowed_origins():
    """Get list of allowed CORS origins from defaults + environment"""
    origins = DEFAULT_CORS_ORIGINS.copy()
    env_origins = os.environ.get('STEPPER_CORS_ORIGINS', '')
    if env_origins:
        for origin in env_origins.split(','):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
    return origins


# ============================================================
# App Setup
# ============================================================

def create_app(config=None):
    """Build the Flask app and wire every shared instance into core_registry.

    Returns (app, socketio). The sequencer is not started here; see
    start_sequencer().
    """
    config = config or StepperConfig.from_env()
    origins = get_allowed_origins()

    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": origins}})
    socketio = SocketIO(app, cors_allowed_origins=origins, async_mode='threading')

    # ── Wire instances into registry ──
    reg.config = config
    reg.socketio = socketio
    reg.control_state = ControlState.from_config(config)
    reg.controls = ControlSurface(reg.control_state)
    reg.controls.on_change(lambda status: socketio.emit('control_update', status))
    reg.sequencer = Sequencer(max_iterations=config.max_iterations)
    reg.playback_manager = PlaybackManager()
    reg.playback_manager.attach(reg.sequencer)
    reg.effects_engine = ColorEffectsEngine()

    playback_init(reg.controls, reg.sequencer, reg.playback_manager, reg.effects_engine)
    app.register_blueprint(playback_bp)

    # ============================================================
    # WebSocket Events
    # ============================================================
    @socketio.on('connect')
    def handle_connect():
        print("🔌 WebSocket client connected", flush=True)
        emit('control_update', reg.controls.get_status())
        emit('playback_update', reg.playback_manager.get_status())

    @socketio.on('disconnect')
    def handle_disconnect():
        print("🔌 WebSocket client disconnected", flush=True)

    @socketio.on('toggle_pause')
    def handle_toggle_pause(data=None):
        # Spacebar / click on the color area
        reg.controls.toggle_pause()

    return app, socketio


def start_sequencer(sequencer, top):
    """Run sequencer.run(top) on a fresh event loop in a daemon thread.

    A failing run is logged and left visible in the sequencer status; the
    thread does not restart it.
    """
    def _run():
        try:
            asyncio.run(sequencer.run(top))
        except Exception as e:
            logging.error(f"❌ Step sequence stopped: {type(e).__name__}: {e}")

    thread = threading.Thread(target=_run, name='stepper-sequencer', daemon=True)
    thread.start()
    return thread


# ============================================================
# Main
# ============================================================

def main():
    logging.basicConfig(level=logging.INFO)
    app, socketio = create_app()
    config = reg.config

    print("\n" + "="*60)
    print(f"  Stepper Core v{STEPPER_VERSION} - Pausable Step Sequences")
    print(f"  Delay: {config.normal_delay_ms}ms (ffwd {config.fast_delay_ms}ms), "
          f"pause check: {config.check_interval_ms}ms")
    print(f"  Max iterations: {config.max_iterations or 'unbounded'}, "
          f"start paused: {config.start_paused}")
    print("="*60 + "\n", flush=True)

    demo = build_demo_sequence(reg.control_state, reg.effects_engine)
    start_sequencer(reg.sequencer, demo.perform)

    socketio.run(app, host='0.0.0.0', port=API_PORT, debug=False, allow_unsafe_werkzeug=True)


if __name__ == '__main__':
    main()
