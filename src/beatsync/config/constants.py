"""
Default values for beat analysis and playback synchronization.
"""

# Energy profile extraction
WINDOW_SIZE = 2048
HOP_SIZE = 512
SPECTRAL_WEIGHT = 0.3

# Windows processed between two cooperative yields
CHUNK_WINDOWS = 256

# Beat classification
MIN_BEAT_SPACING = 0.08  # seconds
STRONG_THRESHOLD_FACTOR = 1.2
REGULAR_THRESHOLD_FACTOR = 0.6
PEAK_MARGIN = 2

# Progress milestones (percent)
EXTRACTION_PROGRESS_SHARE = 50
STATISTICS_PROGRESS = 60
COMPLETE_PROGRESS = 100

# Playback synchronization
SYNC_LOOKAHEAD = 0.1  # seconds

# Decoding
SUPPORTED_AUDIO_FORMATS = ['.wav', '.flac', '.ogg', '.mp3', '.aiff', '.aif', '.m4a']
DECODE_DTYPE = 'float32'

# Logging
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
