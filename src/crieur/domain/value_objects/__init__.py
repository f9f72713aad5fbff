"""
Domain value objects for Crieur.
"""

from crieur.domain.value_objects.channel_name import ChannelName
from crieur.domain.value_objects.envelope import Envelope, EnvelopeType
from crieur.domain.value_objects.target_spec import TargetMode, TargetSpec

__all__ = [
    "ChannelName",
    "Envelope",
    "EnvelopeType",
    "TargetMode",
    "TargetSpec",
]
