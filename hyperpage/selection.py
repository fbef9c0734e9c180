"""
Page lists and file lists: configurable selections of pages and files that drive
"foreach pagelist" and "foreach filelist" loops in templates.
"""

import logging

from hyperpage import config, files
from hyperpage.pipes import to_int


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  PAGE LIST
#####

class PageList:
    """
    Selection of pages from the site's collection, controlled by a configuration dict.
    Configuration is modified with config(options), which merges `options` into the current state;
    passing a complete configuration returned by an earlier config() call restores that state.

    Options, applied to the collection in this order:
    - type:            ''             -- all pages
                       'children'     -- pages whose parent is the context page
                       'siblings'     -- pages with the same parent as the context page, the context page excluded
                       'related'      -- pages sharing at least one tag with the context page, the context page excluded
                       'breadcrumbs'  -- the home page and all ancestors of the requested page, the page itself included
    - context:         URL of the page used instead of the current context page by 'children', 'siblings', 'related'
    - excludeHidden:   skip pages marked as hidden
    - excludeCurrent:  skip the requested page
    - template:        keep only pages using a given template
    - search:          keep only pages containing a given string (case-insensitive) in any text field
    - filter:          keep only pages tagged with a given tag
    - sort:            comma-separated list of "field [asc|desc]" keys; collection order if empty
    - offset, limit:   paging of the final selection
    """

    defaults = {
        'type':             '',
        'context':          '',
        'excludeHidden':    True,
        'excludeCurrent':   False,
        'template':         '',
        'search':           '',
        'filter':           '',
        'sort':             '',
        'offset':           0,
        'limit':            None,
    }

    site    = None
    options = None

    def __init__(self, site, **options):
        self.site = site
        self.options = dict(self.defaults)
        self.options.update(options)

    def config(self, options = None):
        """Merge `options` into the current configuration (if given) and return a copy of the resulting configuration."""
        if options:
            unknown = set(options) - set(self.defaults)
            if unknown:
                log.debug("PageList: ignoring unknown options %s", sorted(unknown))
            self.options.update({key: val for key, val in options.items() if key in self.defaults})
        return dict(self.options)

    def _context_page(self):
        url = self.options['context']
        if url:
            return self.site.get_page(url)
        return self.site.context.get()

    def _select(self):
        """Selection of pages before tag filtering and paging."""
        opt   = self.options
        pages = list(self.site.get_collection().values())
        ptype = (opt['type'] or '').lower()

        if ptype == 'breadcrumbs':
            request = self.site.request
            pages = [p for p in pages if p.url == '/' or request == p.url or request.startswith(p.url.rstrip('/') + '/')]
            return sorted(pages, key = lambda p: p.level)

        if ptype in ('children', 'siblings', 'related'):
            context = self._context_page()
            if context is None:
                return []
            if ptype == 'children':
                pages = [p for p in pages if p.parent == context.url]
            elif ptype == 'siblings':
                pages = [p for p in pages if p.parent == context.parent and p.url != context.url]
            else:
                pages = [p for p in pages if set(p.tags) & set(context.tags) and p.url != context.url]

        if opt['excludeHidden']:
            pages = [p for p in pages if not p.hidden]
        if opt['excludeCurrent']:
            pages = [p for p in pages if p.url != self.site.request]
        if opt['template']:
            pages = [p for p in pages if p.template == opt['template']]
        if opt['search']:
            pages = [p for p in pages if self._contains(p, opt['search'])]

        return self._sort(pages)

    @staticmethod
    def _contains(page, text):
        text = text.lower()
        return any(isinstance(value, str) and text in value.lower() for value in page.data.values())

    def _sort(self, pages):
        keys = [k.split() for k in (self.options['sort'] or '').split(',') if k.strip()]
        # stable sorting: apply the least significant key first
        for key in reversed(keys):
            field = key[0]
            reverse = len(key) > 1 and key[1].lower() == 'desc'
            pages = sorted(pages, key = lambda p: str(p.get(field)).lower(), reverse = reverse)
        return pages

    def _filter(self, pages):
        tag = self.options['filter']
        if not tag: return pages
        return [p for p in pages if tag in p.tags]

    def get_pages(self):
        """The final selection of pages, as a list, in the configured order."""
        pages  = self._filter(self._select())
        offset = max(to_int(self.options['offset']), 0)
        limit  = to_int(self.options['limit'], None)          # no leading integer: no limit
        if limit is None:
            return pages[offset:]
        return pages[offset : offset + max(limit, 0)]

    def get_tags(self):
        """Sorted list of distinct tags of the pages in the selection, before filtering by tag and paging."""
        tags = set()
        for page in self._select():
            tags.update(page.tags)
        return sorted(tags, key = str.lower)

    def count(self):
        """No. of pages in the selection before paging."""
        return len(self._filter(self._select()))

    def neighbors(self, url):
        """Pages that precede and follow the page at `url` in get_pages(), as a dict with 'prev' and/or 'next' keys."""
        pages = self.get_pages()
        urls  = [p.url for p in pages]
        if url not in urls:
            return {}
        pos = urls.index(url)
        found = {}
        if pos > 0:
            found['prev'] = pages[pos - 1]
        if pos < len(pages) - 1:
            found['next'] = pages[pos + 1]
        return found


#####################################################################################################################################################
#####
#####  FILE LIST
#####

class FileList:
    """
    Selection of files matching a glob declaration relative to the current context page.
    Options: glob (comma-separated file declaration), sort ('asc' or 'desc' by file path).
    """

    defaults = {
        'glob':     None,
        'sort':     'asc',
    }

    site    = None
    options = None

    def __init__(self, site, **options):
        self.site = site
        self.options = dict(self.defaults)
        self.options['glob'] = config.FILELIST_GLOB
        self.options.update(options)

    def config(self, options = None):
        if options:
            self.options.update({key: val for key, val in options.items() if key in self.defaults})
        return dict(self.options)

    def get_files(self):
        found = files.resolve(self.options['glob'], self.site.context.get(), self.site.base_dir)
        found = sorted(found, reverse = str(self.options['sort']).lower() == 'desc')
        return found
