"""
View: rendering of the requested page of a Site into a complete HTML document.
"""

import os, logging

from hyperpage import config
from hyperpage.errors import PageNotFound
from hyperpage.templating.interpreter import Interpreter


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  VIEW
#####

class View:

    site = None

    def __init__(self, site):
        self.site = site

    def render(self):
        """
        Interpret the template of the requested page and post-process the output: tags for assets of extensions
        are inserted before </head>, and a generator meta tag after <head>.
        Raises PageNotFound if the requested URL doesn't exist in the site.
        """
        site = self.site
        if site.get_page(site.request) is None: raise PageNotFound(f"page not found: {site.request}")

        page = site.context.get()
        template = page.get_template(site.templates_dir)
        log.debug("rendering page '%s' with template '%s'", page.url, template)

        interpreter = Interpreter(site)
        output = interpreter.interpret(site.load_template(template), os.path.dirname(template), template)
        output = self.create_asset_tags(output, interpreter.assets)
        output = self.add_meta_tags(output)
        return output

    @staticmethod
    def add_meta_tags(html):
        meta = '\n\t<meta name="Generator" content="%s">' % config.GENERATOR
        return html.replace('<head>', '<head>' + meta, 1)

    @staticmethod
    def create_asset_tags(html, assets):
        tags  = ['\t<link type="text/css" rel="stylesheet" href="%s" />\n' % url for url in assets.get('css', [])]
        tags += ['\t<script type="text/javascript" src="%s"></script>\n' % url for url in assets.get('js', [])]
        if not tags: return html
        return html.replace('</head>', ''.join(tags) + '</head>', 1)
