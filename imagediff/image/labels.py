"""Extract source provenance from image labels.

Two label conventions are recognised: the OCI image annotations and the
older label-schema.org keys. When an image carries both, the label-schema
value wins.
"""

from __future__ import annotations

from collections.abc import Mapping

# Lowest to highest precedence.
VCS_URL_LABELS = (
    "org.opencontainers.image.source",
    "org.label-schema.vcs-url",
)
REVISION_LABELS = (
    "org.opencontainers.image.revision",
    "org.label-schema.vcs-ref",
)


def _last_present(labels: Mapping[str, str], keys: tuple[str, ...]) -> str:
    value = ""
    for key in keys:
        candidate = (labels.get(key) or "").strip()
        if candidate:
            value = candidate
    return value


def vcs_url_and_revision(labels: Mapping[str, str] | None) -> tuple[str, str]:
    """Return ``(vcs_url, revision)``; either is ``""`` when no label provides it."""
    if not labels:
        return "", ""
    return _last_present(labels, VCS_URL_LABELS), _last_present(labels, REVISION_LABELS)
