"""Container image helpers.

Submodules:
    reference -- split an image reference into registry/repository/tag.
    labels    -- extract the VCS URL and revision from image labels.
"""

from imagediff.image.labels import (
    REVISION_LABELS,
    VCS_URL_LABELS,
    vcs_url_and_revision,
)
from imagediff.image.reference import ImageReference

__all__ = [
    "ImageReference",
    "REVISION_LABELS",
    "VCS_URL_LABELS",
    "vcs_url_and_revision",
]
