"""
Site: the content model of a single request, as seen by templates.
"""

from collections import OrderedDict

from hyperpage import config
from hyperpage.content import Page, Shared
from hyperpage.selection import PageList, FileList
from hyperpage.templating.structs import Context


#####################################################################################################################################################
#####
#####  SITE
#####

class Site:
    """
    Collection of pages with shared data, bound to a particular request. A Site owns the page list and file list
    configurations, as well as the Context slot (the current page), hence a new Site shall be created for every
    rendering of a page; pages and shared data can be reused between Sites.
    """

    collection    = None        # OrderedDict of {url: Page}
    shared        = None
    request       = None        # URL of the requested page
    query         = None        # dict of query string parameters of the request
    base_dir      = None        # root directory of content files; None if the site has no files
    templates_dir = None
    extensions    = None        # dict of {name: callable} of extensions available to templates, besides importable ones
    context       = None

    def __init__(self, pages, shared = None, request = '/', base_dir = None, templates_dir = None, query = None, extensions = None):
        self.shared     = shared if shared is not None else Shared()
        self.request    = request
        self.query      = dict(query or {})
        self.base_dir   = base_dir
        self.extensions = dict(extensions or {})

        if templates_dir is None and base_dir is not None:
            templates_dir = base_dir.rstrip('/') + config.DIR_TEMPLATES
        self.templates_dir = templates_dir

        self.collection = OrderedDict()
        for page in pages:
            page.shared  = self.shared
            page.request = request
            self.collection[page.url] = page

        self.context  = Context(self.current_page())
        self.pagelist = PageList(self)
        self.filelist = FileList(self)

    def current_page(self):
        """The requested page; an empty page if the URL doesn't exist in the collection."""
        page = self.collection.get(self.request)
        if page is None:
            page = Page(self.request or '/', shared = self.shared)
            page.request = self.request
        return page

    def get_page(self, url):
        return self.collection.get(url)

    def get_collection(self):
        return self.collection

    def get_pagelist(self):
        return self.pagelist

    def get_filelist(self):
        return self.filelist

    def load_template(self, path):
        with open(path, encoding = 'utf-8') as f:
            return f.read()
