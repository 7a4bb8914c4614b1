"""SimHire application pipeline: hiring API, REST client and pipeline statistics."""

__version__ = "0.1.0"
