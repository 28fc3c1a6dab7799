from .photo import PhotoRecord, PhotoResponse, PhotoURLResponse
from .pixel_grid import GRID_SIZE, PixelGrid
from .playback import PlayingId, UserInfo

__all__ = [
    "GRID_SIZE",
    "PhotoRecord",
    "PhotoResponse",
    "PhotoURLResponse",
    "PixelGrid",
    "PlayingId",
    "UserInfo",
]
