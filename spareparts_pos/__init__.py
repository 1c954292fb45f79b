"""Point-of-sale and inventory management for a spare-parts shop."""

__version__ = "1.0.0"
