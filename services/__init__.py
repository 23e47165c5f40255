"""Services backed by external resources: the image bucket and the Telegram Bot API."""

from .image_storage import ImageStorage
from .store_notifier import StoreNotifier

__all__ = [
    "ImageStorage",
    "StoreNotifier",
]
