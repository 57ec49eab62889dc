from fastapi import Depends

from blogkit.config import Settings, get_settings
from blogkit.services.engine import BlogEngine


def get_engine(settings: Settings = Depends(get_settings)) -> BlogEngine:
    return BlogEngine(settings.content_dir, settings.default_author)
