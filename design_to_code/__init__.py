"""
Design-to-Code

A command-line pipeline that turns a text prompt or a UI screenshot into a
structured design specification with Gemini, then into framework source
files with Claude.
"""

__version__ = "1.0.0"
