"""Application package for the personal website backend.

This package exposes the models, repositories, services and HTTP layer
that serve the public portfolio, the blog and the contact form. Individual
modules contain the concrete implementations and documentation.
"""

__version__ = "1.0.0"
