"""
suncore - offline nightcore rendering.

Speeds up a decoded recording, adds bass, synthetic reverb and a click-free
gain envelope, then encodes the result as float WAV or CBR MP3.
"""

__version__ = "1.0.0"
