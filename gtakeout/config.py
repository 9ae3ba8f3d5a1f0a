"""
Configuration constants for the Takeout date fixer.
"""
import os

# --- Sidecar Naming ---
# Google Takeout writes "<media name>.supplemental-metadata.json" next to each file.
# Matching is case-sensitive and purely syntactic.
SUPPLEMENTAL_SUFFIX = ".supplemental-metadata.json"

# --- File Type Definitions ---
# Only formats exifread parses reliably are probed in-process; other stills and all
# video go through exiftool. exifread returns {} for WebP EXIF, which would read as "no date".
IMAGE_EXTS = {'.jpg', '.jpeg', '.jpe', '.tif', '.tiff', '.png'}
EXIFTOOL_IMAGE_EXTS = {'.heic', '.heif', '.webp'}
VIDEO_EXTS = {'.mp4', '.mov', '.avi', '.mkv', '.m4v', '.3gp', '.webm', '.flv', '.wmv'}

# Extension to Type Mapping
EXT_TO_TYPE = {}
for ext in IMAGE_EXTS: EXT_TO_TYPE[ext] = 'image'
for ext in EXIFTOOL_IMAGE_EXTS: EXT_TO_TYPE[ext] = 'exiftool_image'
for ext in VIDEO_EXTS: EXT_TO_TYPE[ext] = 'video'

# --- Date Probing ---
# Order matters: original capture -> modification -> digitized
EXIFREAD_DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'Image DateTime',
    'EXIF DateTimeDigitized',
]

EXIFTOOL_PROBE_TAGS = [
    'DateTimeOriginal',
    'ModifyDate',
    'CreateDate',
    'MediaCreateDate',
    'TrackCreateDate',
]

# exiftool reports unset QuickTime dates as all zeros
NULL_EXIF_DATE = "0000:00:00 00:00:00"

# --- Date Writing ---
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

# Original capture, generic modification, digitized capture
IMAGE_WRITE_TAGS = ['DateTimeOriginal', 'ModifyDate', 'CreateDate']
VIDEO_WRITE_TAGS = IMAGE_WRITE_TAGS + [
    'MediaCreateDate',
    'MediaModifyDate',
    'TrackCreateDate',
    'TrackModifyDate',
]

# --- External Tooling ---
EXIFTOOL_BIN = "exiftool"
EXIFTOOL_TIMEOUT_SEC = 120

# --- Concurrency ---
DEFAULT_WORKERS = os.cpu_count() or 1
