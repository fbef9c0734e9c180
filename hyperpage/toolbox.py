"""
Toolbox: built-in methods callable from templates by name, like in:

    <@ pagelist { type: "children", sort: "date desc" } @>
    <@ img { file: "*.jpg", width: 300, class: "hero" } @>

Methods take the Toolbox and a dict of options. Their return value is converted to a string for output.
"""

import logging
from datetime import datetime
from xml.sax.saxutils import quoteattr

from hyperpage import config, files
from hyperpage.pipes import to_string, date_format


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  REGISTRY
#####

METHODS = {}

def method(name):
    """Decorator that registers a function in METHODS under a given name."""
    def register(fun):
        METHODS[name] = fun
        return fun
    return register


class Toolbox:
    """Access to built-in methods for a particular Site."""

    site = None

    def __init__(self, site):
        self.site = site

    def has_method(self, name):
        return name in METHODS

    def invoke(self, name, options):
        log.debug("toolbox method '%s' called with %s", name, options)
        return to_string(METHODS[name](self, dict(options or {})))


#####################################################################################################################################################
#####
#####  BUILT-IN METHODS
#####

@method('pagelist')
def pagelist(toolbox, options):
    """Reconfigure the page list of the site. Produces no output."""
    toolbox.site.get_pagelist().config(options)
    return ''

@method('filelist')
def filelist(toolbox, options):
    """Reconfigure the file list of the site. Produces no output."""
    toolbox.site.get_filelist().config(options)
    return ''

@method('date')
def date(toolbox, options):
    """
    Formatted date: the `date` option if present, otherwise the "date" field of the current page,
    or the current time if the page has no date. The format is given by the `format` option.
    """
    value = options.get('date') or toolbox.site.context.get().get('date') or datetime.now()
    return date_format(value, options.get('format') or config.DATE_FORMAT)

@method('img')
def img(toolbox, options):
    """
    <img> tag for the first file matching the `file` declaration, resized to fit `width` and/or `height`
    (cropped if `crop` is true). Options `alt`, `class` and `title` are copied to attributes.
    """
    site = toolbox.site
    found = files.resolve(options.get('file'), site.context.get(), site.base_dir, first_only = True)
    if not found:
        return ''

    file = found[0]
    path = site.base_dir.rstrip('/') + file
    size = None
    if options.get('width') or options.get('height'):
        resized = files.resize(site.base_dir, file, options.get('width'), options.get('height'), options.get('crop'))
        if resized:
            file, size = resized[0], resized[1:]
    if size is None:
        size = files.image_size(path)

    attrs = [('src', file)]
    if size: attrs += [('width', size[0]), ('height', size[1])]
    attrs += [(name, options[name]) for name in ('alt', 'class', 'title') if name in options]
    return '<img %s>' % ' '.join(f'{name}={quoteattr(to_string(value))}' for name, value in attrs)
