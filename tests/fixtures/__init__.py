# Test fixtures for albumfix
from tests.fixtures.media_samples import (
    MINIMAL_JPEG as MINIMAL_JPEG,
    MINIMAL_PNG as MINIMAL_PNG,
    MINIMAL_MP4 as MINIMAL_MP4,
    MINIMAL_MOV as MINIMAL_MOV,
    write_media_file as write_media_file,
)
from tests.fixtures.generators import (
    assignment_value as assignment_value,
    create_takeout_album as create_takeout_album,
    sidecar_payload as sidecar_payload,
    write_offset_csv as write_offset_csv,
    write_sidecar as write_sidecar,
)
