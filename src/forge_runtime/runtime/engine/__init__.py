"""Text generation engine interface."""

from .base import EngineGate, GenerateResult, TextEngine

__all__ = ["EngineGate", "GenerateResult", "TextEngine"]
