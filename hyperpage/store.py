"""
DATA STORE -- loading of pages and shared data from a directory tree of YAML files.

Layout of a content directory:

    <base_dir>/
        shared/data.yml                     -- shared data
        pages/<template>.yml                -- home page "/", rendered with <template>
        pages/01.blog/<template>.yml        -- page "/blog"; numeric prefixes only define the order of siblings
        pages/01.blog/02.post/<template>.yml
        pages/01.blog/02.post/image.jpg     -- files of a page, accessible with file declarations
        templates/<template>.html
"""

import os, re, logging, posixpath
import yaml

from hyperpage import config
from hyperpage.content import Page, Shared
from hyperpage.errors import ContentError
from hyperpage.site import Site


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  DATA STORE
#####

class DataStore:
    """Base class for content stores. A store loads all pages and shared data of a site."""

    def load(self):
        """Return a pair (pages, shared), where `pages` is a list of Page objects in collection order."""
        raise NotImplementedError

    def site(self, request = '/', query = None, extensions = None):
        """Load content and create a Site for a given request."""
        pages, shared = self.load()
        return Site(pages, shared, request = request, query = query, extensions = extensions, **self._site_args())

    def _site_args(self):
        return {}


class YamlStore(DataStore):
    """Pages and shared data stored in YAML files of a content directory (see module docstring)."""

    base_dir = None

    _prefix = re.compile(r'^\d+\.')

    def __init__(self, base_dir):
        self.base_dir = base_dir.rstrip('/')

    def _site_args(self):
        return {'base_dir': self.base_dir}

    def load(self):
        shared = self._load_shared()
        pages  = []
        root   = self.base_dir + config.DIR_PAGES

        if os.path.isdir(root):
            self._load_dir(root, '/', '/', shared, pages, is_root = True)

        log.debug("YamlStore loaded %s pages from '%s'", len(pages), self.base_dir)
        return pages, shared

    def _load_shared(self):
        path = os.path.join(self.base_dir + config.DIR_SHARED, config.SHARED_DATA_FILE)
        if not os.path.isfile(path):
            return Shared()
        return Shared(self._read(path))

    def _load_dir(self, directory, url, path, shared, pages, is_root = False):
        entries   = sorted(os.listdir(directory))
        datafiles = [name for name in entries if name.endswith(config.DATA_FILE_EXT) and os.path.isfile(os.path.join(directory, name))]

        if datafiles:
            datafile = os.path.join(directory, datafiles[0])
            template = datafiles[0][: -len(config.DATA_FILE_EXT)]
            mtime    = Page.mtime_of(directory, datafile)
            pages.append(Page(url, self._read(datafile), shared, path = path, template = template, mtime = mtime))

        elif not is_root:
            return                  # a directory without a data file is not a page, and neither are its subdirectories

        for name in entries:
            subdir = os.path.join(directory, name)
            if not os.path.isdir(subdir): continue
            slug = self._prefix.sub('', name)
            self._load_dir(subdir, posixpath.join(url, slug), path + name + '/', shared, pages)

    @staticmethod
    def _read(path):
        try:
            with open(path, encoding = 'utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as ex:
            raise ContentError(f"can't parse data file '{path}': {ex}") from ex

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ContentError(f"data file '{path}' must contain a mapping of fields, not {type(data).__name__}")
        return data
