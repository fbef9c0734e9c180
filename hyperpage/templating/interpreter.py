"""
Interpreter of templates: a session of rendering one page.
"""

import os, html, logging, posixpath

from hyperpage import config, files
from hyperpage.extensions import Extension
from hyperpage.toolbox import Toolbox
from hyperpage.templating.parser import parse
from hyperpage.templating.structs import Runtime


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  INTERPRETER
#####

class Interpreter:
    """
    State of rendering of a page: the Runtime scope of loop variables, snippets defined so far,
    assets requested by extensions, and the directory of the template being interpreted (for resolving includes).
    The Context (current page) belongs to the Site, which provides content.

    A new Interpreter shall be created for every rendering. Syntax trees are shared between Interpreters,
    and node classes read and modify the Interpreter passed to their render() as `state`.
    """

    site      = None
    context   = None
    runtime   = None
    toolbox   = None
    snippets  = None        # {name: body node}, filled in by snippet definitions in the order of rendering
    assets    = None        # {'css': [url, ...], 'js': [url, ...]} collected from extensions
    directory = None        # directory of the template currently interpreted
    depth     = 0           # current no. of nested interpret() calls and snippet calls

    def __init__(self, site, toolbox = None):
        self.site     = site
        self.context  = site.context
        self.runtime  = Runtime(site)
        self.toolbox  = toolbox if toolbox is not None else Toolbox(site)
        self.snippets = {}
        self.assets   = {'css': [], 'js': []}

    def interpret(self, text, directory, filename = None):
        """Render a template `text` that was read from a file located in `directory`."""
        if not self._enter(): return ''
        parent, self.directory = self.directory, directory
        try:
            return parse(text, filename).render(self)
        finally:
            self.directory = parent
            self.depth -= 1

    def _enter(self):
        if self.depth >= config.MAX_DEPTH:
            log.warning("max. depth of nested includes or snippet calls (%s) exceeded in '%s'", config.MAX_DEPTH, self.directory)
            return False
        self.depth += 1
        return True

    def get_value(self, name):
        """
        Value of a variable: a query string parameter (escaped for HTML) if `name` starts with "?",
        a runtime variable if one is set, otherwise a field of the current page or shared data.
        """
        if name.startswith(config.QUERY_PREFIX):
            value = self.site.query.get(name[len(config.QUERY_PREFIX):], '')
            return html.escape(str(value))
        if self.runtime.is_runtime_var(name):
            return self.runtime.get(name)
        return self.context.get().get(name)

    def include(self, path):
        """Interpret a template file at `path` relative to the current directory. A missing file renders as ''."""
        file = os.path.join(self.directory or '', path)
        if not os.path.isfile(file):
            log.warning("included file not found: %s", file)
            return ''
        log.debug("including %s", file)
        return self.interpret(self.site.load_template(file), os.path.dirname(file), file)

    def call(self, name, options):
        """
        Call a snippet, a toolbox method or an extension, in this order of precedence.
        Unknown names render as ''.
        """
        if name in self.snippets:
            if not self._enter(): return ''
            try:
                return self.snippets[name].render(self)
            finally:
                self.depth -= 1

        if self.toolbox.has_method(name):
            return self.toolbox.invoke(name, options)

        extension = Extension(name, options, self.site)
        self.merge_assets(extension.get_assets())
        return extension.get_output()

    def merge_assets(self, assets):
        for kind, urls in (assets or {}).items():
            merged = self.assets.setdefault(kind, [])
            merged += [url for url in urls if url not in merged]

    def resolve_files(self, declaration, first_only = False):
        return files.resolve(declaration, self.context.get(), self.site.base_dir, first_only)

    def process_file(self, file, options, body):
        """
        Render `body` with runtime variables describing a `file`: :file, :basename and, for images,
        :width and :height; if `options` are given, the image is resized and :fileResized, :widthResized,
        :heightResized are set, too. The runtime scope is restored afterwards.
        """
        runtime = self.runtime
        shelf = runtime.shelve()
        try:
            runtime.set(config.KEY_FILE, file)
            runtime.set(config.KEY_BASENAME, posixpath.basename(file))

            if files.is_image(file) and self.site.base_dir is not None:
                size = files.image_size(self.site.base_dir.rstrip('/') + file)
                if size:
                    runtime.set(config.KEY_WIDTH, size[0])
                    runtime.set(config.KEY_HEIGHT, size[1])
                if size and options:
                    resized = files.resize(self.site.base_dir, file, options.get('width'), options.get('height'), options.get('crop'))
                    if resized:
                        runtime.set(config.KEY_FILE_RESIZED, resized[0])
                        runtime.set(config.KEY_WIDTH_RESIZED, resized[1])
                        runtime.set(config.KEY_HEIGHT_RESIZED, resized[2])

            return body.render(self)
        finally:
            runtime.unshelve(shelf)
