"""Scaffold transformation pipeline.

Turns a freshly generated Rails app into an Appforge project: overlay the
template set, patch the generated files, then provision.
"""

from .core import Provisioner
from .overlay import OverlayEngine
from .patches import PatchEngine, derive_namespace

__all__ = [
    "OverlayEngine",
    "PatchEngine",
    "Provisioner",
    "derive_namespace",
]
