"""Convert API collections between Postman, Insomnia, Thunder Client and friends."""

__version__ = "0.1.0"
