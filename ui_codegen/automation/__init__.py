"""Recording engine (normalizer/renderer/driver) and helpers."""

from .normalizer import Normalizer, SessionState
from .recorder import Recorder, RecorderConfig
from .renderer import render, render_script
