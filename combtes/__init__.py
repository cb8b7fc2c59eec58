"""Combine HMMER / RepeatMasker TE predictions into non-overlapping final candidates."""

__version__ = "0.1.0"
