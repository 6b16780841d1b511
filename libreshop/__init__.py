"""Browse homebrew app repositories and install apps from the terminal."""

__version__ = "0.2"
__all__ = ["app", "installer", "layout", "pager", "repository"]