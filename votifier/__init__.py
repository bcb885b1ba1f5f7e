"""
Votifier - vote notification receiver

A small TCP service embedded in a host application. Vote-reporting
sites connect, receive a greeting, and send a single RSA-encrypted
block describing one vote. The block is decrypted, parsed and handed
to every registered listener.

Operating rules:
- The private key never leaves the process
- Nothing is written back to a client after the greeting
- One connection or listener failing never affects another
"""

__version__ = "2.0.0"
__all__ = ["__version__"]
