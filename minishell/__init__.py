"""A small interactive command shell with pipes, redirections, heredocs and built-ins."""

__version__ = "0.1.0"
__all__ = ["__version__"]