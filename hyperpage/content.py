"""
Content model: pages and shared data.
Both are read-only from the point of view of the template interpreter, which observes field lookups only.
"""

import os, posixpath
from datetime import datetime

from hyperpage import config


#####################################################################################################################################################
#####
#####  UTILITIES
#####

def parse_tags(value):
    """Convert a raw `tags` field (a list, or a comma-separated string) to a list of unique, non-empty tags."""
    if not value: return []
    if isinstance(value, str):
        value = value.split(',')
    tags = []
    for tag in value:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags

def is_truthy(value):
    """Interpret a flag stored in a data file, where booleans may be written down as strings."""
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'on', 'yes', '1')
    return bool(value)

def parent_url(url):
    if url == '/': return None
    return posixpath.dirname(url.rstrip('/')) or '/'

def url_level(url):
    if url == '/': return 0
    return url.strip('/').count('/') + 1


#####################################################################################################################################################
#####
#####  SHARED
#####

class Shared:
    """Site-wide data, visible as a fallback for fields that are missing in a page."""

    data = None

    def __init__(self, data = None):
        self.data = dict(data or {})

    def get(self, field):
        return self.data.get(field, '')

    def __contains__(self, field):
        return field in self.data


#####################################################################################################################################################
#####
#####  PAGE
#####

class Page:
    """
    A single page of the site: a flat mapping of field names to values (strings or structured data)
    plus system properties: URL, filesystem path, level in the page tree, parent URL, template, tags.
    Lookup of a field falls back to Shared data, then to a small set of computed system fields.
    """

    url      = None
    path     = None         # path of the page directory, relative to config.DIR_PAGES, with leading and trailing "/"
    level    = None         # depth in the page tree, 0 for the home page
    parent   = None         # URL of the parent page, None for the home page
    template = None
    data     = None
    shared   = None
    tags     = None
    hidden   = False
    mtime    = None         # modification time as a datetime, if known

    request  = None         # URL of the currently requested page; assigned by Site

    def __init__(self, url, data = None, shared = None, path = None, parent = None, level = None, template = None, mtime = None):
        self.url      = url
        self.shared   = shared if shared is not None else Shared()
        self.path     = path or ('/' if url == '/' else url.rstrip('/') + '/')
        self.parent   = parent if parent is not None else parent_url(url)
        self.level    = level if level is not None else url_level(url)
        self.template = template or config.TEMPLATE_DEFAULT
        self.mtime    = mtime

        self.data = dict(data or {})
        self.data[config.KEY_URL]      = self.url
        self.data[config.KEY_PATH]     = self.path
        self.data[config.KEY_LEVEL]    = self.level
        self.data[config.KEY_PARENT]   = self.parent or ''
        self.data[config.KEY_TEMPLATE] = self.template

        self.tags   = parse_tags(self.data.get(config.KEY_TAGS))
        self.hidden = is_truthy(self.data.get(config.KEY_HIDDEN))

    def get(self, field):
        """
        Value of a given field: from page data, if present there; otherwise from shared data;
        otherwise a computed system field; an empty string if none of these exists.
        """
        if field in self.data:
            return self.data[field]
        if field in self.shared:
            return self.shared.get(field)

        if field == config.KEY_CURRENT_PAGE:
            return 'true' if self.is_current() else ''
        if field == config.KEY_CURRENT_PATH:
            return 'true' if self.is_in_current_path() else ''
        if field == config.KEY_BASENAME:
            return posixpath.basename(self.path.rstrip('/'))
        if field == config.KEY_MTIME:
            return self.mtime.strftime(config.DATE_FORMAT) if self.mtime else ''
        return ''

    def is_current(self):
        """True if this page is the currently requested page."""
        return self.request == self.url

    def is_in_current_path(self):
        """True if this page is an ancestor of the currently requested page, or the requested page itself."""
        if self.request is None: return False
        if self.request == self.url: return True
        return self.request.startswith(self.url.rstrip('/') + '/')

    def get_template(self, templates_dir):
        """Full path of the template file of this page."""
        return os.path.join(templates_dir, self.template + config.TEMPLATE_EXT)

    @staticmethod
    def mtime_of(*paths):
        """Latest modification time of existing `paths`, as a datetime; None if no path exists."""
        stamps = [os.path.getmtime(p) for p in paths if p and os.path.exists(p)]
        return datetime.fromtimestamp(max(stamps)) if stamps else None

    def __repr__(self):
        return f"Page({self.url!r})"
