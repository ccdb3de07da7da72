"""mongostore: MongoDB adapter with cache and HTTP session backends.

The session backend stores each session as a structured document, grows
session lifetimes with use and tombstones destroyed sessions so they can
never be resurrected by a concurrent write.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
