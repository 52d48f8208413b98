"""
NoteType: terminal journal and notes manager.

This package provides a keyboard-driven terminal interface and a command
line for keeping plain Markdown notes and dated journal entries. It includes:

- Daily journal entries with time-stamped sections
- Notes in the working directory with create, append and delete
- Hashtag indexing and filtering across notes and journal entries
- Built-in and custom templates with {{placeholder}} substitution
- Eight colour themes, persisted between sessions
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .app import launch
from .cli import main

__all__ = ['launch', 'main']
