"""
Extensions: external code callable from templates by name, like a toolbox method.

    <@ vendor/gallery { files: "*.jpg" } @>

An extension is looked up in the `extensions` registry of the Site first, then as an importable Python module:
"vendor/gallery" is imported as "vendor.gallery", and its render() function is called; or, if the module
has no render(), a callable named like the last segment of the path ("gallery").
The callable receives (options, site) and returns the output. CSS and JS files required by the extension
are reported as assets: URLs listed in the `assets` attribute of the callable or the module,
plus all *.css and *.js files placed in the module's directory, if it's inside the site's base directory.
"""

import os, glob, logging, importlib

from hyperpage.errors import ExtensionError
from hyperpage.pipes import to_string


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  EXTENSION
#####

class Extension:

    name      = None
    options   = None
    site      = None
    target    = None        # callable that produces the output; None if the extension can't be found
    module    = None        # module where `target` was found, if any
    _output   = None

    def __init__(self, name, options, site):
        self.name    = name
        self.options = dict(options or {})
        self.site    = site
        self.target, self.module = self._resolve(name)

    def _resolve(self, name):
        target = self.site.extensions.get(name)
        if target is not None:
            return self._check(target), None

        path = name.strip('/').replace('/', '.')
        try:
            module = importlib.import_module(path)
        except ImportError as ex:
            log.warning("extension not found '%s': %s", name, ex)
            return None, None

        target = getattr(module, 'render', None) or getattr(module, path.rsplit('.', 1)[-1], None)
        if target is None: raise ExtensionError(f"extension module '{path}' defines neither render() nor {path.rsplit('.', 1)[-1]}()")
        return self._check(target), module

    def _check(self, target):
        if not callable(target): raise ExtensionError(f"extension '{self.name}' is not callable")
        return target

    def get_output(self):
        """Output of the extension as a string, computed once."""
        if self.target is None:
            return ''
        if self._output is None:
            self._output = to_string(self.target(self.options, self.site))
        return self._output

    def get_assets(self):
        """{'css': [url, ...], 'js': [url, ...]} of files required by the extension."""
        assets = {'css': [], 'js': []}
        if self.target is None:
            return assets

        declared = getattr(self.target, 'assets', None) or getattr(self.module, 'assets', None) or {}
        for kind in assets:
            assets[kind] += list(declared.get(kind, []))

        directory = os.path.dirname(getattr(self.module, '__file__', '') or '')
        base_dir  = self.site.base_dir
        if directory and base_dir:
            base = os.path.abspath(base_dir)
            for kind in assets:
                for path in sorted(glob.glob(os.path.join(directory, '*.' + kind))):
                    rel = os.path.relpath(os.path.abspath(path), base)
                    if rel.startswith('..'):
                        log.debug("asset outside of the base directory skipped: %s", path)
                        continue
                    url = '/' + rel.replace(os.sep, '/')
                    if url not in assets[kind]:
                        assets[kind].append(url)
        return assets
