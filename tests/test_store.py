import pytest

from hyperpage import config
from hyperpage.errors import ContentError, PageNotFound
from hyperpage.store import YamlStore
from hyperpage.view import View


#####################################################################################################################################################
#####
#####  UTILITIES
#####

def write(path, text):
    path.parent.mkdir(parents = True, exist_ok = True)
    path.write_text(text, encoding = 'utf-8')

@pytest.fixture
def base_dir(tmp_path):
    write(tmp_path / 'shared' / 'data.yml',                 "sitename: Demo\n")
    write(tmp_path / 'pages' / 'page.yml',                  "title: Home\n")
    write(tmp_path / 'pages' / '01.blog' / 'page.yml',      "title: Blog\ntags: [news, web]\n")
    write(tmp_path / 'pages' / '01.blog' / '02.post' / 'post.yml', "title: Post\nhidden: true\n")
    write(tmp_path / 'pages' / '01.blog' / 'assets' / 'x.txt', "not a page")
    write(tmp_path / 'pages' / '02.about' / 'page.yml',     "title: About\n")
    write(tmp_path / 'templates' / 'page.html',
          "<html><head></head><body>@{ title }|@{ sitename }|<@ elements/nav.html @><@ widget @></body></html>")
    write(tmp_path / 'templates' / 'post.html',             "<p>@{ title }</p>")
    write(tmp_path / 'templates' / 'elements' / 'nav.html', "<@ foreach pagelist @>[@{ title }]<@ end @>")
    return tmp_path

def widget(options, site):
    return "W"

widget.assets = {'css': ['/widget.css'], 'js': ['/widget.js']}


#####################################################################################################################################################
#####
#####  TESTS
#####

def test_yaml_store(base_dir):
    pages, shared = YamlStore(str(base_dir)).load()
    assert [p.url for p in pages] == ['/', '/blog', '/blog/post', '/about']

    post = pages[2]
    assert post.template == 'post' and post.hidden
    assert post.path == '/01.blog/02.post/'
    assert post.parent == '/blog' and post.level == 2
    assert post.get(config.KEY_MTIME) != ''
    assert pages[1].tags == ['news', 'web']
    assert shared.get('sitename') == 'Demo'

def test_yaml_store_errors(tmp_path):
    write(tmp_path / 'pages' / 'page.yml', "- a list\n- not a mapping\n")
    with pytest.raises(ContentError):
        YamlStore(str(tmp_path)).load()

    write(tmp_path / 'pages' / 'page.yml', "title: [unclosed\n")
    with pytest.raises(ContentError):
        YamlStore(str(tmp_path)).load()

def test_view(base_dir):
    site = YamlStore(str(base_dir)).site('/blog', extensions = {'widget': widget})
    html = View(site).render()

    assert '<body>Blog|Demo|[Home][Blog][About]W</body>' in html
    assert '<head>\n\t<meta name="Generator" content="%s">' % config.GENERATOR in html
    assert '\t<link type="text/css" rel="stylesheet" href="/widget.css" />\n' \
           '\t<script type="text/javascript" src="/widget.js"></script>\n</head>' in html

def test_view_templates(base_dir):
    site = YamlStore(str(base_dir)).site('/blog/post')
    assert View(site).render() == "<p>Post</p>"

def test_view_not_found(base_dir):
    site = YamlStore(str(base_dir)).site('/nope')
    with pytest.raises(PageNotFound):
        View(site).render()

def test_extension_module(base_dir, monkeypatch):
    write(base_dir / 'ext_vendor_test' / '__init__.py', "")
    write(base_dir / 'ext_vendor_test' / 'gallery.py',
          "def render(options, site):\n    return 'G%s' % options.get('n')\n")
    write(base_dir / 'ext_vendor_test' / 'gallery.css', "")
    monkeypatch.syspath_prepend(str(base_dir))

    write(base_dir / 'templates' / 'page.html', "<html><head></head><body><@ ext_vendor_test/gallery { n: 2 } @></body></html>")
    html = View(YamlStore(str(base_dir)).site('/')).render()
    assert '<body>G2</body>' in html
    assert 'href="/ext_vendor_test/gallery.css"' in html
