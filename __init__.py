"""
Theme Manager Client Service

This service registers a theme installation with the remote admin panel,
gates features on the activation handshake, checks GitHub releases for
newer theme versions and reports daily site health.
"""

__version__ = "1.0.0"
