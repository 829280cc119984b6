"""Walk In My Shoes AR accessibility auditor."""

__version__ = "1.0.0"
