"""Wire codec and socket transport.

The transport lives in ``forge_runtime.io.server``; it is not imported here
since the dispatcher itself depends on the codec.
"""

from .codec import DecodeError, decode, encode, encode_str

__all__ = ["DecodeError", "decode", "encode", "encode_str"]
