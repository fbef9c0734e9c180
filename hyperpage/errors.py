"""
Exceptions for Hyperpage.
"""

class HyperpageException(Exception): pass

class ConfigError(HyperpageException): pass

class ContentError(HyperpageException):
    """A data file of a content store can't be read or has incorrect structure."""

class PageNotFound(ContentError):
    """The requested URL does not exist in the collection of pages."""

class ExtensionError(HyperpageException):
    """An extension was found, but it doesn't satisfy the call contract."""


class TemplateSyntaxError(HyperpageException):
    """A template could not be parsed. Reports the position of the failure, as line and column numbers."""

    def __init__(self, msg, text = None, pos = None, filename = None):
        self.pos = pos
        self.filename = filename
        if text is not None and pos is not None:
            self.line = text.count('\n', 0, pos) + 1
            self.column = pos - (text.rfind('\n', 0, pos) + 1) + 1
            msg = self.make_msg(msg)
        HyperpageException.__init__(self, msg)

    def make_msg(self, msg):
        if self.filename:
            return msg + " in '%s', line %s, column %s" % (self.filename, self.line, self.column)
        return msg + " at line %s, column %s" % (self.line, self.column)
