"""
HandField Configuration Management.
===================================

This module defines the tuning space for the HandField instrument.
The parameters are organized into the same "Layer Cake" as the runtime:
signal conditioning -> hand metrics -> particle physics -> rendering.

! WARNING !
Every constant below was tuned against MediaPipe Hands' noise profile.
If you swap the tracking source, re-tune Layers 1-3 before touching physics.
"""

import math

# --- MASTER CONFIGURATION ---
CONFIG = {
    # =========================================================
    # LAYER 1: SIGNAL CONDITIONING (The Smoothers)
    # =========================================================
    "ALPHA_FAST": 0.6,              # Pinch: must feel immediate
    "ALPHA_DEFAULT": 0.35,          # General per-frame metrics
    "ALPHA_SLOW": 0.15,             # Openness, tension, palm sign: must not flicker
    "NOMINAL_DT": 0.016,            # Seconds assumed when no elapsed time is known
    "MIN_DT": 0.001,                # Floor for finite differences
    "EPSILON": 1e-6,                # Floor for geometric divisions and clock comparisons

    # =========================================================
    # LAYER 2: HAND METRICS (The Extractor)
    # =========================================================
    "ENERGY_DECAY": 0.96,           # Multiplicative decay per nominal tick (1/60 s)
    "ENERGY_TICK": 1.0 / 60.0,      # Reference tick the decay factor is expressed in
    "ENERGY_GAIN": 0.2,             # Energy added per tick at speed 1.0
    "SPEED_SCALE": 10.0,            # hypot(vx, vy) / SPEED_SCALE -> speed
    "VELOCITY_LIMIT": 20.0,         # Per-axis clamp on raw velocity (glitch guard)

    "REF_HAND_SIZE": 0.25,          # Wrist -> middle MCP length at neutral distance
    "MIN_HAND_SIZE": 0.05,          # Floor before inverting hand size
    "DEPTH_SCALE": 3.0,             # Sensitivity of size-based depth
    "DEPTH_LIMIT": 3.0,             # Depth is clamped to [-LIMIT, LIMIT]

    "THUMB_CURL_RANGE": 0.15,       # Thumb tip <-> index MCP distance treated as fully open
    "CURL_REACH_RATIO": 1.3,        # Tip closer than 1.3x MCP reach starts curling
    "CURL_FOLD_PENALTY": 0.3,       # Added when the tip hangs below its PIP joint

    "PINCH_NEAR": 0.02,             # Thumb/index distance mapped to pinch = 1
    "PINCH_FAR": 0.14,              # Thumb/index distance mapped to pinch = 0
    "SPREAD_NEAR": 0.02,            # Mean adjacent tip gap mapped to spread = 0
    "SPREAD_FAR": 0.10,             # Mean adjacent tip gap mapped to spread = 1

    "NEUTRAL_OPENNESS": 0.6,        # Relaxed hand baseline (also the empty value)
    "GRIP_PINCH_RELIEF": 0.5,       # Pinching removes up to half of the grip
    "CONFIDENCE": 0.9,              # Reported while a hand is present
    "LANDMARK_Z_SCALE": 2.0,        # Wrist-relative landmark z -> display depth

    # =========================================================
    # LAYER 3: FIELD PHYSICS (The Integrator)
    # =========================================================
    "PARTICLE_COUNT": 15000,        # Particle budget
    "INITIAL_SHAPE": "Galaxy",      # Shape label shown at startup
    "RANDOM_SEED": None,            # Set for reproducible fields
    "INITIAL_SPREAD": 50.0,         # Side of the startup scatter cube
    "SHAPE_RADIUS": 3.6,            # Scene scale of every shape

    "HAND_SCALE": 5.0,              # Metrics space (-1..1) -> scene units
    "HAND_DEPTH_SCALE": 4.0,        # Metrics depth -> scene z (closer = towards viewer)

    "LERP_ABSENT": 0.03,            # Spring pull with no hand
    "LERP_PRESENT": 0.06,           # Spring pull with a hand
    "LERP_TRANSITION": 0.09,        # Spring pull while morphing shapes
    "LERP_EXPRESSIVE": 0.03,        # Extra pull per unit expressiveness
    "DAMPING_BASE": 0.9,
    "DAMPING_OPENNESS": 0.05,       # Open hand settles faster
    "DAMPING_GRIP": 0.08,           # Grip keeps momentum
    "DAMPING_ENERGY": 0.05,         # Energy keeps momentum
    "DAMPING_MIN": 0.5,             # Hard floor/ceiling keep the integrator stable
    "DAMPING_MAX": 0.98,

    "BREATH_FREQ": 0.6,
    "BREATH_AMPLITUDE": 0.08,

    # =========================================================
    # LAYER 3.5: FORCE TERMS (The Instrument)
    # =========================================================
    "EXPAND_MIN": 0.3,              # Radial scale at openness 0
    "EXPAND_GAIN": 1.2,             # Extra radial scale at openness 1
    "EXPAND_MIN_RADIUS": 0.1,       # Targets this close to the origin are not scaled

    "PINCH_THRESHOLD": 0.2,
    "PINCH_PULL": 3.0,              # Attraction numerator
    "PINCH_MIN_DIST": 0.5,          # Attraction denominator floor
    "PINCH_MIX": 0.3,               # Attraction -> blend factor
    "SPIRAL_RADIUS": 2.0,           # Spiral only inside this distance
    "SPIRAL_THRESHOLD": 0.5,
    "SPIRAL_SPEED": 4.0,
    "SPIRAL_GAIN": 0.3,

    "VORTEX_THRESHOLD": 0.1,
    "VORTEX_RADIUS": 8.0,
    "VORTEX_STRENGTH": 2.0,         # grip * STRENGTH -> angular rate
    "VORTEX_TWIST": 0.1,            # Angle -> rotation actually applied
    "VORTEX_LIFT": 0.5,             # Vertical oscillation gain

    "TURBULENCE_THRESHOLD": 0.1,
    "TURBULENCE_SPREAD": 0.5,
    "TURBULENCE_ENERGY": 0.3,
    "TURBULENCE_FREQ": 3.0,
    "TURBULENCE_FREQ_ENERGY": 5.0,

    "DRIFT_X": 0.5,
    "DRIFT_Y": 0.3,

    "BEAM_THRESHOLD": 0.3,
    "BEAM_RADIUS": 3.0,
    "BEAM_LENGTH": 8.0,
    "BEAM_MIX": 0.5,
    "BEAM_SCATTER": 0.3,
    "BEAM_SLOTS": 100,              # Particles are spread over this many beam stations

    "WAVE_GAIN": 0.1,
    # (frequency, phase multiplier) for index, middle, ring, pinky
    "WAVE_FINGERS": ((2.0, 1.0), (2.5, 1.2), (3.0, 1.4), (3.5, 1.6)),

    "TRAIL_THRESHOLD": 0.1,
    "TRAIL_RADIUS": 5.0,
    "TRAIL_GAIN": 0.3,

    "JITTER_THRESHOLD": 0.5,
    "JITTER_GAIN": 0.3,

    # =========================================================
    # LAYER 4: SHAPE TRANSITIONS (The Morph)
    # =========================================================
    "TRANSITION_DURATION": 1.5,     # Seconds from snapshot to new shape
    "EJECTION_WINDOW": 0.5,         # Impulse is gone after this many seconds
    "EJECTION_RISE": 12.0,          # Exponential ramp-up rate of the impulse
    "EJECTION_MIN": 2.0,            # Impulse magnitude band
    "EJECTION_MAX": 5.0,
    "SWIRL_SPEED": 3.0,
    "SWIRL_GAIN": 0.5,
    "FLASH_WINDOW": 0.3,            # Flash fades out over this many seconds
    "WOBBLE_FREQ": 12.0,
    "WOBBLE_GAIN": 0.15,

    # =========================================================
    # LAYER 5: RENDERING (Global Side Effects)
    # =========================================================
    "SPIN_BASE": 0.03,              # rad/s about the vertical axis
    "SPIN_GRIP": 0.2,               # extra rad/s at full grip
    "ROLL_RATE": 0.01,
    "ROLL_TILT": 0.3,
    "POINT_SIZE": 0.1,
    "POINT_SIZE_ENERGY": 0.08,
    "POINT_SIZE_CLOSED": 0.03,
    "POINT_SIZE_FLASH": 0.05,
    "OPACITY_BASE": 0.6,
    "OPACITY_ENERGY": 0.3,
    "OPACITY_FLASH": 0.1,
    "LIGHT_PEAK": 2.0,              # Emissive intensity at flash = 1
    "TINT_SATURATION": 0.3,
    "TINT_PINCH_HUE": 0.1,
    "TINT_OPEN_HUE": 0.05,

    # =========================================================
    # HOST (Camera, Window, Logging)
    # =========================================================
    "CAMERA_INDEX": 0,
    "TARGET_FPS": 30,
    "MP_MIN_DETECTION_CONFIDENCE": 0.7,
    "MP_MIN_TRACKING_CONFIDENCE": 0.6,
    "WINDOW_WIDTH": 1280,
    "WINDOW_HEIGHT": 720,
    "CAMERA_DISTANCE": 12.0,        # Virtual camera z for the projection
    "FOCAL_LENGTH": 620.0,          # Pixels; matches a ~60 deg vertical FOV at 720p
    "PREVIEW_SCALE": 0.25,          # Camera thumbnail size relative to the window
    "BASE_COLORS": (
        (0.31, 0.76, 0.97),         # Sky
        (1.00, 0.42, 0.71),         # Rose
        (0.55, 1.00, 0.45),         # Lime
        (1.00, 0.84, 0.00),         # Gold
    ),
    "LOG_LEVEL": "INFO",
}

# Derived once; the breathing and swirl terms are periodic in this.
TWO_PI = 2.0 * math.pi
