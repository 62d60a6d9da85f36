"""Client library for the Coze open API: workflows, event streams, users, variables and templates."""

__version__ = "0.1.0"