"""Spec Blame package."""

from .config import AnnotateConfig, BlameConfig, InjectConfig

__all__ = ["AnnotateConfig", "BlameConfig", "InjectConfig"]
