"""Storage-backed collections, contract contexts with mock storage, CBOR entry points and example contracts."""

__version__ = "0.2.0"