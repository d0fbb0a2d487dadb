"""TETRA downlink decoding: burst synchronisation and splitting, upper MAC, LLC and MLE parsing."""

__version__ = "0.0.9"