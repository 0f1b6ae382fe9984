"""Services module initialization."""
from .editor import ImageEditor, EditResult
from .settings import Settings, configure_logging
from .recipe_serializer import RecipeSerializer

__all__ = ["ImageEditor", "EditResult", "Settings", "configure_logging", "RecipeSerializer"]
