"""
Image blobs on Django's default storage.

A stored image is identified by the name the storage backend returns; that
reference is kept verbatim on the group, expense or user row.
"""

import logging
import os
import uuid

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)

IMAGE_CATEGORIES = ('profile', 'group', 'expense')


def store_image(category: str, image) -> str:
    """Save an uploaded image under its category and return the reference."""
    if category not in IMAGE_CATEGORIES:
        raise ValueError(f"Unknown image category: {category!r}")
    extension = os.path.splitext(image.name or '')[1].lower()
    return default_storage.save(f"{category}/{uuid.uuid4().hex}{extension}", image)


def release_image(reference: str) -> None:
    """Delete a stale image. Failures are logged and ignored."""
    if not reference:
        return
    try:
        default_storage.delete(reference)
    except OSError as e:
        logger.warning("Could not delete image %s: %s", reference, e)
