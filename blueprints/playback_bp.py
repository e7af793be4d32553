"""
Stepper Host - Playback Control Blueprint
Routes: /api/playback/*
Dependencies: controls (ControlSurface), sequencer, playback_manager, effects_engine
"""

from flask import Blueprint, jsonify

playback_bp = Blueprint('playback', __name__)

# Dependencies injected at registration time
_controls = None
_sequencer = None
_playback_manager = None
_effects_engine = None


def init_app(controls, sequencer, playback_manager, effects_engine):
    """Initialize blueprint with required dependencies."""
    global _controls, _sequencer, _playback_manager, _effects_engine
    _controls = controls
    _sequencer = sequencer
    _playback_manager = playback_manager
    _effects_engine = effects_engine


# ─────────────────────────────────────────────────────────
# Status
# ─────────────────────────────────────────────────────────

@playback_bp.route('/api/playback/status', methods=['GET'])
def get_playback_status():
    """Control state, sequencer progress, last result and current color."""
    return jsonify({
        'control': _controls.get_status(),
        'sequencer': _sequencer.get_status(),
        'playback': _playback_manager.get_status(),
        'effect': _effects_engine.get_status(),
    })


# ─────────────────────────────────────────────────────────
# Transport Controls
# ─────────────────────────────────────────────────────────

@playback_bp.route('/api/playback/pause', methods=['POST'])
def pause_playback():
    """Pause before the next step, remembering the current speed."""
    return jsonify({'success': True, **_controls.pause()})


@playback_bp.route('/api/playback/play', methods=['POST'])
def play_playback():
    """Resume at normal speed."""
    return jsonify({'success': True, **_controls.play()})


@playback_bp.route('/api/playback/ffwd', methods=['POST'])
def ffwd_playback():
    """Resume at fast speed."""
    return jsonify({'success': True, **_controls.ffwd()})


@playback_bp.route('/api/playback/toggle', methods=['POST'])
def toggle_playback():
    """Pause, or resume at the remembered speed (spacebar / click on the area)."""
    return jsonify({'success': True, **_controls.toggle_pause()})


@playback_bp.route('/api/playback/step', methods=['POST'])
def step_playback():
    """Let one step through while paused."""
    status = _controls.step_once()
    if not status['granted']:
        return jsonify({'success': False, 'error': 'Single-step is only available while paused', **status}), 409
    return jsonify({'success': True, **status})
