"""
Activity app services layer.

Recording never raises; reading checks membership.
"""

from .activity_log import (
    ACTIVITY_TEMPLATES,
    record_activity,
    render_content,
    get_group_activity,
)


__all__ = [
    'ACTIVITY_TEMPLATES',
    'record_activity',
    'render_content',
    'get_group_activity',
]
