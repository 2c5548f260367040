"""Coffee: community posting with admin-gated member verification."""

__version__ = "0.1.0"
