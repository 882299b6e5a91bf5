"""
HandCloud Configuration Management.
===================================

This module defines the parameter space for the HandCloud visual engine.
The parameters are organized into an architectural "Layer Cake" model,
from the raw camera signal at the bottom to the pixels at the top.

! WARNING !
Smoothing factors are per-frame values tuned for a ~30-60 FPS host loop.
Only the layout layer is frame-rate independent (rate * elapsed seconds).
"""

# --- LANDMARK INDICES (MediaPipe Hands topology) ---
LANDMARKS = {
    "WRIST": 0,
    "THUMB_TIP": 4,
    "INDEX_MCP": 5,
    "INDEX_TIP": 8,
    "MIDDLE_MCP": 9,
    "MIDDLE_TIP": 12,
    "RING_MCP": 13,
    "RING_TIP": 16,
    "PINKY_MCP": 17,
    "PINKY_TIP": 20,
}
NUM_LANDMARKS = 21

# Non-thumb fingers as (tip, mcp) pairs, used for the curl score
CURL_FINGERS = [
    (LANDMARKS["INDEX_TIP"], LANDMARKS["INDEX_MCP"]),
    (LANDMARKS["MIDDLE_TIP"], LANDMARKS["MIDDLE_MCP"]),
    (LANDMARKS["RING_TIP"], LANDMARKS["RING_MCP"]),
    (LANDMARKS["PINKY_TIP"], LANDMARKS["PINKY_MCP"]),
]

# --- MASTER CONFIGURATION ---
CONFIG = {
    # =========================================================
    # LAYER 0: PERCEPTION (Camera + Detector)
    # =========================================================
    "CAMERA_INDEX": 0,              # OpenCV device ID
    "CAMERA_WIDTH": 640,
    "CAMERA_HEIGHT": 480,
    "TARGET_FPS": 30,
    "MAX_HANDS": 2,                 # Two roles, never more
    "MODEL_COMPLEXITY": 1,          # 0=Fast, 1=Balanced
    "MIN_DETECTION_CONFIDENCE": 0.7,
    "MIN_TRACKING_CONFIDENCE": 0.5,
    "MIRROR_INPUT": True,           # Flip camera frame so the preview reads like a mirror

    # =========================================================
    # LAYER 1: INPUT SIGNAL (The Stabilizer)
    # =========================================================
    "POSITION_SMOOTHING": 0.3,      # Lower = smoother, Higher = responsive
    "GESTURE_SMOOTHING": 0.2,       # Pinch + rotation

    # =========================================================
    # LAYER 2: GESTURE GEOMETRY
    # =========================================================
    "PINCH_MAX_EXTENT": 0.2,        # Thumb-index distance that reads as "fully open"
    "DEPTH_SENSITIVITY": 3.0,       # Multiplier for Z movement relative to baseline
    "ROTATION_SENSITIVITY": 2.0,    # Multiplier for palm angles

    # =========================================================
    # LAYER 3: LAYOUT STATE MACHINE
    # =========================================================
    "LAYOUT_LERP_RATE": 3.0,        # Per second
    "LAYOUT_MAX_STEP": 0.5,         # Upper bound of a single tick's factor (< 1)
    "LAYOUT_DROPOUT_GRACE": 0,      # Ticks a lost role still counts as detected (0 = off)
    "GLOW_OPACITY_SOLO": 0.2,       # Glow ring stays in solo/idle, fades in DUAL
    "GLOW_OPACITY_DUAL": 0.0,

    # =========================================================
    # LAYER 4: CONTROL MAPPING (Hand -> Object)
    # =========================================================
    "PINCH_SCALE_BASE": 0.5,        # scale = base + pinch * gain
    "PINCH_SCALE_GAIN": 1.5,
    "SCALE_LIMITS": (0.1, 3.0),
    "ZOOM_LIMITS": (-5.0, 2.0),

    # =========================================================
    # LAYER 5: POINT CLOUD GEOMETRY
    # =========================================================
    "SPHERE_RADIUS": 1.5,
    "SPHERE_SEGMENTS": 64,          # Points per latitude band
    "SPHERE_RINGS": 40,             # Latitude bands (count = segments * rings)
    "POINT_SIZE": 0.03,
    "POINT_SIZE_VARIATION": 0.01,
    "RING_COUNT": 5,                # Distinct orbital rings
    "RING_SPACING": 0.4,
    "RING_BASE_SEGMENTS": 80,       # Points on the innermost ring
    "RING_SEGMENT_STEP": 20,        # Extra points per outer ring
    "RING_POINT_SIZE_FACTOR": 0.7,
    "BASE_COLOR_HSL": (0.75, 0.8, 0.6),  # Purple
    "RANDOM_SEED": 7,

    # =========================================================
    # LAYER 6: POINT CLOUD ANIMATION
    # =========================================================
    "VISUAL_LERP": 0.05,            # Visual state (mode crossfades)
    "SCALE_LERP": 0.1,
    "ROTATION_LERP": 0.1,
    "ZOOM_LERP": 0.08,
    "PULSE_SPEED": 2.0,
    "PULSE_AMOUNT": 0.15,
    "WAVE_SPEED": 1.5,
    "WAVE_AMOUNT": 0.05,
    "BREATHE_SPEED": 2.0,
    "BREATHE_AMOUNT": 0.005,
    "RING_STABLE_CHAOS": 0.02,
    "RING_DYNAMIC_CHAOS": 0.1,
    "AUTO_SPIN_SPEED": 0.05,
    "WOBBLE_SPEED": 0.2,
    "WOBBLE_AMOUNT": 0.05,
    "USER_ROTATION_GAIN": 5.0,      # wave -> user rotation influence
    "HUE_CYCLE_SPEED": 0.2,
    "HUE_CYCLE_AMOUNT": 0.05,
    "SPHERE_OPACITY": 0.9,
    "RING_OPACITY": 0.6,
    "VISIBILITY_THRESHOLD": 0.01,   # Below this the object is not rendered

    # =========================================================
    # LAYER 7: AMBIENT EFFECTS
    # =========================================================
    "AMBIENT_COUNT": 200,
    "AMBIENT_MIN_RADIUS": 5.0,
    "AMBIENT_MAX_RADIUS": 15.0,
    "GLOW_INNER_RADIUS": 1.8,
    "GLOW_OUTER_RADIUS": 2.2,

    # =========================================================
    # LAYER 8: RENDERER (OpenCV preview)
    # =========================================================
    "CANVAS_WIDTH": 1280,
    "CANVAS_HEIGHT": 720,
    "CAMERA_FOV": 60.0,             # Degrees, vertical
    "CAMERA_DISTANCE": 5.0,
    "BLOOM_STRENGTH": 1.5,
    "BLOOM_SIGMA": 6.0,
    "BACKGROUND_BGR": (26, 10, 10),
    "PREVIEW_WIDTH": 240,           # Webcam inset
    "FPS_WINDOW": 0.5,              # Seconds between FPS updates
}

# --- LAYOUT PRESETS ---
# Targets per layout for the left-role (pink) and right-role (blue) object.
# x: horizontal offset, opacity: master opacity, scale: radius scale,
# wave: 0 = stable breathing sphere, 1 = rippling surface.
LAYOUT_TARGETS = {
    "IDLE": {
        "left": {"x": 0.0, "opacity": 0.0, "scale": 0.1, "wave": 0.0},
        "right": {"x": 0.0, "opacity": 0.0, "scale": 0.1, "wave": 0.0},
    },
    "LEFT_SOLO": {
        "left": {"x": 0.0, "opacity": 1.0, "scale": 1.0, "wave": 0.0},   # Center, Stable
        "right": {"x": 4.0, "opacity": 0.0, "scale": 0.5, "wave": 1.0},  # Hidden right
    },
    "RIGHT_SOLO": {
        "left": {"x": -4.0, "opacity": 0.0, "scale": 0.5, "wave": 1.0},  # Hidden left
        "right": {"x": 0.0, "opacity": 1.0, "scale": 1.0, "wave": 0.0},  # Center, Stable
    },
    "DUAL": {
        "left": {"x": -2.2, "opacity": 1.0, "scale": 0.8, "wave": 1.0},  # Left, Wavy
        "right": {"x": 2.2, "opacity": 1.0, "scale": 0.8, "wave": 1.0},  # Right, Wavy
    },
}

# Starting point of the interpolated layout (both objects)
INITIAL_LAYOUT = {"x": 0.0, "opacity": 0.0, "scale": 1.0, "wave": 0.0}

# Object base hues per role
ROLE_HUES = {
    "left": 0.85,   # Pink / Magenta
    "right": 0.55,  # Blue / Cyan
}
