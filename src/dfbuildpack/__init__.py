"""
dfbuildpack - DreamFactory buildpack for Heroku and Cloud Native Buildpacks
"""

__version__ = "1.0.0"

from .core import Buildpack, BuildpackError

__all__ = ["Buildpack", "BuildpackError"]
