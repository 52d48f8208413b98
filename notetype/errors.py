"""
Exceptions raised by the NoteType stores and engines.

The interactive session turns every one of these into a status message;
the command line prints it and exits non-zero.
"""


class NoteTypeError(Exception):
    pass


class NotFoundError(NoteTypeError):
    """The requested note, journal entry or file does not exist."""


class StorageError(NoteTypeError):
    """A read, write, delete or directory creation failed on disk."""


class UnknownThemeError(StorageError):
    pass


class TemplateNotFoundError(NoteTypeError):
    pass


class EmptyInputError(NoteTypeError):
    """Nothing usable was supplied to save or append."""
