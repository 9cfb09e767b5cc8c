"""Linux runtime for finding, downloading and applying Wallpaper Engine workshop wallpapers."""

__version__ = "0.1.0"
__all__ = ["app", "desktop", "history", "kde", "steam", "wallpaper", "workshop"]