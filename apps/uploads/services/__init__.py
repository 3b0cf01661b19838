from .image_storage import (
    upload_profile_image,
    upload_group_image,
    upload_expense_image,
)

__all__ = [
    'upload_profile_image',
    'upload_group_image',
    'upload_expense_image',
]
