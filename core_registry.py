"""
Stepper Core Registry - Shared Instance Registry

Host modules import from here to reach each other's instances.
stepper_core.py populates these during startup.

All attributes are None until create_app() wires them up.
"""

# ── Control ──
control_state = None      # ControlState instance
controls = None           # ControlSurface instance

# ── Playback ──
sequencer = None          # Sequencer instance
playback_manager = None   # PlaybackManager instance (result observer)
effects_engine = None     # ColorEffectsEngine instance (effect sink)

# ── Infrastructure ──
socketio = None           # Flask-SocketIO instance
config = None             # StepperConfig used at startup
