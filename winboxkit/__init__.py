"""RouterOS nv::Message in binary and text form, with MD4 and RC4 helpers."""

__version__ = "0.1.0"

__all__ = ["binary", "md4", "message", "nvjson", "rc4"]