"""
yochat - ask Gemini a question from the terminal.
Streams the answer and copies any suggested shell commands to the clipboard.
"""

__version__ = "0.1"
