"""VML Designer - materialization and synchronization runtime for low-code forms."""

__version__ = "0.1.0"
