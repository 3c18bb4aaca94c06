"""Protocol layer: message framing, numeric encodings, command builders, and response parsing."""

from .framing import build_frame
from .commands import Command, build_command
