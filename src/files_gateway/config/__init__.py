"""
Configuration management for the Files Gateway.

Contains the Pydantic settings model and the loaders that turn missing
environment values into a ``ConfigurationError`` at startup.
"""
