"""Core pieces of a small shell: environment, built-ins, redirections and pipelines."""

__version__ = "0.1.0"