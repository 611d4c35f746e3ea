"""Exception types raised by md2html."""


class Md2HtmlError(Exception):
    """Base class for md2html failures."""

    pass


class RenderError(Md2HtmlError):
    """Raised when the document cannot be read or rendered remotely."""

    pass


class WatchError(Md2HtmlError):
    """Raised when the watch on the document cannot be (re-)established."""

    pass
