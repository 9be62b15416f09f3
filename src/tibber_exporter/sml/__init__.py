"""Smart Message Language (SML) codec.

``decode`` splits a byte stream into frames (SML transport v1),
``parse`` turns one frame into a list of messages.
"""

from tibber_exporter.sml.parser import parse
from tibber_exporter.sml.transport import decode

__all__ = ["decode", "parse"]
