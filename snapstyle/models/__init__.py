"""
All domain models. Import from here so routes and services share one set of types.
"""

from .content import ImagePayload, GeneratedImage, Suggestions, SocialPost
from .options import OptionField, OptionSelection, Quality, CaptionStrategy
from .session import Phase, Session, InvalidTransition

__all__ = [
    "ImagePayload", "GeneratedImage", "Suggestions", "SocialPost",
    "OptionField", "OptionSelection", "Quality", "CaptionStrategy",
    "Phase", "Session", "InvalidTransition",
]
