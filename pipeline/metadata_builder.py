#!/usr/bin/env python3
"""
Metadata Builder

Turns a parsed sidecar into the ordered list of exiftool tag assignments
for one media file. Building has no side effects; an empty list is a valid
result and means "copy the file as-is".
"""

from datetime import datetime
from pathlib import Path
from typing import List

from pipeline.exceptions import SidecarError
from pipeline.offset_times import OffsetTimeTable
from pipeline.sidecar import SidecarRecord
from pipeline.utils import clean_string, get_media_type

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

# Wildcard tags so both the signed value and the hemisphere reference tags
# are written (or cleared) in one assignment
GPS_LATITUDE_TAG = "GPSLatitude*"
GPS_LONGITUDE_TAG = "GPSLongitude*"
GPS_ALTITUDE_TAG = "GPSAltitude*"
# Combined tag needed by QuickTime containers, which lack discrete GPS tags
GPS_COORDINATES_TAG = "GPSCoordinates"


def _format_number(value) -> str:
    """Render a coordinate without float noise (25.0 -> "25", 1e-05 -> "0.00001")."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        text = f"{value:.10f}".rstrip("0").rstrip(".")
        return text
    return str(value)


class MetadataBuilder:
    """Builds exiftool assignments from sidecar records"""

    def __init__(self, offset_table: OffsetTimeTable):
        self.offset_table = offset_table

    def format_timestamp(self, timestamp: int, media_path) -> str:
        """Render an epoch timestamp as local civil time in the file's offset.

        Raises:
            SidecarError: If the timestamp falls outside the datetime range
        """
        tz = self.offset_table.timezone_for(media_path)
        try:
            return datetime.fromtimestamp(timestamp, tz=tz).strftime(EXIF_DATE_FORMAT)
        except (OverflowError, OSError, ValueError) as e:
            raise SidecarError(f"Timestamp {timestamp} out of range for {media_path}") from e

    def build(self, record: SidecarRecord, media_path) -> List[str]:
        """Build the tag assignments for one media file.

        Args:
            record: Parsed sidecar
            media_path: Media file the assignments are for (used for the
                offset lookup and to decide image-only tags)

        Returns:
            Ordered list of "-Tag=value" arguments

        Raises:
            SidecarError: If the capture time cannot be rendered
        """
        assignments: List[str] = []

        if record.timestamp is not None:
            local_time = self.format_timestamp(record.timestamp, media_path)
            assignments.append(f"-DateTimeOriginal={local_time}")
            assignments.append(f"-FileCreateDate={local_time}")

        if record.geo is not None:
            if record.clears_gps:
                assignments.extend(
                    [
                        f"-{GPS_LATITUDE_TAG}=",
                        f"-{GPS_LONGITUDE_TAG}=",
                        f"-{GPS_ALTITUDE_TAG}=",
                        f"-{GPS_COORDINATES_TAG}=",
                    ]
                )
            else:
                lat, lon, alt = (_format_number(v) for v in record.geo)
                assignments.extend(
                    [
                        f"-{GPS_LATITUDE_TAG}={lat}",
                        f"-{GPS_LONGITUDE_TAG}={lon}",
                        f"-{GPS_ALTITUDE_TAG}={alt}",
                        f"-{GPS_COORDINATES_TAG}={lat}, {lon}, {alt}",
                    ]
                )

        title = clean_string(record.title)
        if title:
            assignments.append(f"-Title={title}")

        description = clean_string(record.description)
        if description:
            assignments.append(f"-Description={description}")
            if get_media_type(Path(str(media_path))) == "image":
                assignments.append(f"-ImageDescription={description}")

        return assignments
