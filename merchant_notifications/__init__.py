"""New-order emails and sales reports for merchant branches."""

__version__ = "1.0.0"
