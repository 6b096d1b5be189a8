"""Promotional video generator: marketing copy to storyboard to video."""

__version__ = "0.1.0"
