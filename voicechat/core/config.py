"""
Core configuration constants for the voice command pipeline.
These are transport-agnostic settings.
"""

# -------------------------
# COMMAND PIPELINE
# -------------------------
CONFIDENCE_THRESHOLD = 0.5  # final transcripts at or below this are not parsed
SELF_SENDER = "self"  # sender sentinel for messages written by the user

# -------------------------
# RECOGNIZER ERROR CODES
# -------------------------
NOT_SUPPORTED = "not-supported"
START_FAILED = "start-failed"
RECOVERABLE_RECOGNITION_ERRORS = frozenset({"no-speech"})  # keep listening

# -------------------------
# AUDIO LEVEL ANALYSIS
# -------------------------
SAMPLE_RATE = 16000
CHANNELS = 1
CHUNK_MS = 50  # one level sample per captured chunk
FFT_SIZE = 256
SMOOTHING_TIME_CONSTANT = 0.8  # 0..1, higher = slower meter
MIN_DECIBELS = -100.0  # maps to level 0
MAX_DECIBELS = -30.0  # maps to level 100

# -------------------------
# EVENT LOOP
# -------------------------
EVENT_POLL_S = 0.1

# -------------------------
# DEMO UI
# -------------------------
SERVER_NAME = "0.0.0.0"
SERVER_PORT = 7860
UI_REFRESH_S = 0.3
