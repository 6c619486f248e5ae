"""
devassist - screen-aware developer assistant.

Watches on-screen text, detects errors, suggests improvements and recalls
relevant snippets from a local store.
"""

__version__ = "0.1.0"
