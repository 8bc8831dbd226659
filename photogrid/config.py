# config.py
"""
Configuration constants for the photo grid editor
"""

# Grid defaults
DEFAULT_ROWS = 4
DEFAULT_COLUMNS = 4
MIN_GRID_DIMENSION = 1

# Track sizing (fr units)
DEFAULT_TRACK_WEIGHT = 1.0
MIN_TRACK_WEIGHT = 0.2

# Photo placement
DEFAULT_PHOTO_X = 50.0  # percent, centered
DEFAULT_PHOTO_Y = 50.0
DEFAULT_PHOTO_SCALE = 1.0
DEFAULT_PHOTO_ROTATION = 0.0
MIN_PHOTO_SCALE = 0.1
MAX_PHOTO_SCALE = 5.0
ZOOM_STEP = 0.05  # Applied per wheel notch

# Photo intake
MAX_PHOTOS = 16
IMAGE_MIME_PREFIX = "image/"
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Layout records
DEFAULT_LAYOUT_NAME = "My Photo Album"
LAYOUT_VERSION = "1.0"
LAYOUT_FILE_EXTENSIONS = ['.json']
MAX_LAYOUT_FILE_BYTES = 64 * 1024 * 1024  # 16 photos as data URLs
CELL_ID_PREFIX = "cell-"

# Autosave settings
AUTOSAVE_INTERVAL_MS = 5 * 60 * 1000  # 5 minutes in milliseconds
AUTOSAVE_PATH = "autosave"
MAX_AUTOSAVE_FILES = 5
AUTOSAVE_TIMESTAMP_FORMAT = "yyyyMMdd_HHmmss"

# Logging
LOG_FILE_NAME = "photogrid.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
