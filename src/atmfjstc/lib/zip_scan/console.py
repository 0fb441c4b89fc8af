"""
Terminal output for the ``zip-scan`` command.

Messages are printed in an appropriate color (where available) and on the appropriate stream: listings and progress go
to stdout, warnings and errors to stderr. The command-line code should do all its user-facing output through the
`console` singleton::

    from atmfjstc.lib.zip_scan.console import console

    console.print_warning("test")
"""

import sys

from typing import Optional, Tuple, TextIO

from termcolor import cprint


class Console:
    """
    An abstraction for printing messages to the user via the terminal.

    Don't create your own instances of this (except in tests).
    """

    _stdout_enabled: bool = True
    _color_enabled: bool = True

    def __init__(self, enable_stdout: bool = True, enable_color: bool = True):
        self._stdout_enabled = enable_stdout
        self._color_enabled = enable_color

    def print_info(self, message: str, **kwargs) -> 'Console':
        return self.print_message('info', message, **kwargs)

    def print_success(self, message: str, **kwargs) -> 'Console':
        return self.print_message('success', message, **kwargs)

    def print_warning(self, message: str, **kwargs) -> 'Console':
        return self.print_message('warning', message, **kwargs)

    def print_error(self, message: str, **kwargs) -> 'Console':
        return self.print_message('error', message, **kwargs)

    def disable_stdout(self) -> 'Console':
        """
        Disables messages that would normally go to stdout (i.e. anything except warnings and errors).
        """
        self._stdout_enabled = False
        return self

    def enable_stdout(self) -> 'Console':
        self._stdout_enabled = True
        return self

    def disable_color(self) -> 'Console':
        self._color_enabled = False
        return self

    def enable_color(self) -> 'Console':
        self._color_enabled = True
        return self

    def print_message(self, kind: str, message: str, major: bool = False, minor: bool = False) -> 'Console':
        """
        Prints a message of a programmatically specified type.

        Args:
            kind: Can be 'info', 'success', 'warning', 'error'. Unknown kinds are printed like 'info'.
            message: The message to print. Can be multiline.
            major: Signals that this message is more important than others of its kind (rendered in bold).
            minor: Signals that this message is less important than others of its kind (rendered without bold).

        Returns:
            The console object (to enable a fluent interface)
        """
        props = _PROPS_BY_MSG_TYPE.get(kind, _PROPS_BY_MSG_TYPE['info'])

        channel_name = props.get('channel', 'stdout')
        if channel_name == 'stdout' and not self._stdout_enabled:
            return self

        channel = sys.stderr if channel_name == 'stderr' else sys.stdout

        attrs = props.get('attrs', ())
        if major and ('bold' not in attrs):
            attrs += ('bold',)
        if minor and ('bold' in attrs):
            attrs = tuple(attr for attr in attrs if attr != 'bold')

        if self._color_enabled:
            _print_maybe_with_color(message, props.get('color'), attrs, channel)
        else:
            print(message, file=channel)

        return self


def _print_maybe_with_color(text: str, color: Optional[str], attrs: Tuple[str, ...], channel: TextIO):
    if (color is None) and (len(attrs) == 0):
        print(text, file=channel)
    else:
        cprint(text, color or 'white', attrs=list(attrs), file=channel)


_PROPS_BY_MSG_TYPE = {
    'info': dict(),
    'success': dict(color='green', attrs=('bold',)),
    'warning': dict(color='yellow', attrs=('bold',), channel='stderr'),
    'error': dict(color='red', attrs=('bold',), channel='stderr'),
}


# Singleton
console = Console()
"""The currently active console abstraction."""
