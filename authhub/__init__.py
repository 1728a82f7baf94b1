"""
AuthHub: credential issuance and session lifecycle for web applications.
"""

__version__ = "1.0.0"
