"""Browser session implementations."""

from .stealth import StealthSession

__all__ = ['StealthSession']
