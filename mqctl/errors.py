"""Errors raised by mqctl commands."""


class CommandError(Exception):
    """A command could not be completed as requested."""