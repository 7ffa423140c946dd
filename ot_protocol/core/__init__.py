# Core Oblivious Transfer Implementation Module
"""
Group arithmetic and the sender/receiver protocol logic.
"""

from .group import P256Group
from .oblivious_transfer import OTSender, OTReceiver

__all__ = ['P256Group', 'OTSender', 'OTReceiver']
