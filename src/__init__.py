"""setup-utoo — cache-aware acquisition of the utoo CLI on CI workers."""

__version__ = "0.1.0"
