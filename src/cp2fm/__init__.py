"""Convert content packages into feature models."""

__version__ = "0.1.0"
