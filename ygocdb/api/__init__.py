from ygocdb.api.cards import router as cards_router
from ygocdb.api.dataset import router as dataset_router
from ygocdb.api.health import router as health_router
from ygocdb.api.images import router as images_router
from ygocdb.api.pre_release import router as pre_release_router

__all__ = [
    "cards_router",
    "dataset_router",
    "health_router",
    "images_router",
    "pre_release_router",
]
