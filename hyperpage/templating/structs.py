"""
Data structures for the state of template interpretation: the Context (current page) and the Runtime scope
(loop-only system variables).
"""

from hyperpage import config


########################################################################################################################################################

class Stack(list):
    """Stack implementation based on standard <list>."""

    def push(self, value):
        """Append `value` to the stack and return its index in the list."""
        self.append(value)
        return len(self) - 1

    def top(self):
        return self[-1]


class Context:
    """
    The currently active page, against which unqualified variable names are resolved.
    Internally, a stack of pages: with-statements and page loops push a page on top and pop it when done,
    so that the previous page becomes active again. The stack is never empty.
    """

    def __init__(self, page):
        self.pages = Stack([page])

    def get(self):
        """The current page."""
        return self.pages.top()

    def set(self, page):
        """Replace the current page, without creating a new level on the stack."""
        self.pages[-1] = page

    def push(self, page):
        self.pages.push(page)

    def pop(self):
        """Remove the current page and reactivate the previous one. The bottom page can't be removed."""
        if len(self.pages) <= 1: raise IndexError("can't pop the last page from Context")
        return self.pages.pop()

    @property
    def depth(self):
        return len(self.pages)


########################################################################################################################################################

class Runtime:
    """
    Runtime scope: values of reserved system variables (:i, :tag, :filter, :file, ...) that exist only inside
    loops and with-statements. The scope can be saved with shelve() and restored with unshelve();
    unshelve() replaces the entire scope with the snapshot, so that variables set inside a nested loop
    don't leak to the enclosing scope.
    Counters of the page list and file list (:pagelistCount etc.) are computed on request and are always defined.
    """

    site = None
    data = None
    keys = None         # names of reserved variables that can be set, read from config on creation

    def __init__(self, site):
        self.site = site
        self.data = {}
        self.keys = {
            config.KEY_INDEX, config.KEY_TAG, config.KEY_FILTER, config.KEY_FILE, config.KEY_BASENAME, config.KEY_FILE_RESIZED,
            config.KEY_WIDTH, config.KEY_HEIGHT, config.KEY_WIDTH_RESIZED, config.KEY_HEIGHT_RESIZED,
        }
        self.computed = {
            config.KEY_PAGELIST_COUNT:          lambda: site.get_pagelist().count(),
            config.KEY_PAGELIST_DISPLAY_COUNT:  lambda: len(site.get_pagelist().get_pages()),
            config.KEY_FILELIST_COUNT:          lambda: len(site.get_filelist().get_files()),
        }

    def is_runtime_var(self, key):
        """
        True if `key` is a runtime variable that currently has a value. Reserved keys that are not set
        in the current scope (e.g., :basename outside a file loop) fall through to page fields.
        """
        return key in self.data or key in self.computed

    def get(self, key):
        if key in self.computed:
            return self.computed[key]()
        return self.data.get(key, '')

    def set(self, key, value):
        if key not in self.keys: raise KeyError(f"not a runtime variable: {key}")
        self.data[key] = value

    def shelve(self):
        """Snapshot of the entire scope, to be passed to unshelve() later on."""
        return dict(self.data)

    def unshelve(self, shelf):
        self.data = dict(shelf)
