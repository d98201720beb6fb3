"""Application-level utilities (environment, settings)."""

from .settings import RecorderSettings
from .environment import Paths, build_default_paths
