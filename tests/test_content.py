import pytest

from hyperpage import config
from hyperpage.content import Page, Shared, parse_tags, is_truthy, parent_url, url_level
from hyperpage.pipes import process, to_string
from hyperpage.site import Site


#####################################################################################################################################################
#####
#####  TESTS
#####

def test_helpers():
    assert parse_tags("a, b,, a ,c") == ['a', 'b', 'c']
    assert parse_tags(['x', 1]) == ['x', '1']
    assert parse_tags(None) == []
    assert is_truthy("Yes") and is_truthy(True) and not is_truthy("false") and not is_truthy('')
    assert parent_url('/') is None
    assert parent_url('/blog') == '/'
    assert parent_url('/blog/post') == '/blog'
    assert url_level('/') == 0 and url_level('/blog/post') == 2

def test_page_fields():
    shared = Shared({'sitename': 'Demo', 'title': 'Shared'})
    page = Page('/blog/post', {'title': 'Post', 'tags': 'a, b', 'hidden': 'true'}, shared)

    assert page.get('title') == 'Post'                 # page data wins over shared data
    assert page.get('sitename') == 'Demo'
    assert page.get('missing') == ''
    assert page.get(config.KEY_URL) == '/blog/post'
    assert page.get(config.KEY_PATH) == '/blog/post/'
    assert page.get(config.KEY_PARENT) == '/blog'
    assert page.get(config.KEY_LEVEL) == 2
    assert page.get(config.KEY_TEMPLATE) == config.TEMPLATE_DEFAULT
    assert page.get(config.KEY_BASENAME) == 'post'
    assert page.get(config.KEY_MTIME) == ''
    assert page.tags == ['a', 'b'] and page.hidden

def test_current_page():
    pages = [Page('/'), Page('/blog'), Page('/blog/post'), Page('/about')]
    site = Site(pages, request = '/blog/post')
    home, blog, post, about = pages

    assert post.get(config.KEY_CURRENT_PAGE) == 'true'
    assert blog.get(config.KEY_CURRENT_PAGE) == ''
    assert blog.get(config.KEY_CURRENT_PATH) == 'true'
    assert home.get(config.KEY_CURRENT_PATH) == 'true'
    assert about.get(config.KEY_CURRENT_PATH) == ''

    assert site.context.get() is post
    assert list(site.get_collection()) == ['/', '/blog', '/blog/post', '/about']

def test_missing_page():
    site = Site([Page('/')], request = '/nope')
    assert site.get_page('/nope') is None
    assert site.context.get().url == '/nope'
    assert site.context.get().get('title') == ''

def test_pipes():
    assert to_string(None) == '' and to_string(True) == 'true' and to_string(5) == '5'
    assert to_string(['a', 'b']) == 'a, b'
    assert process("<p>Some   text</p>", [('stripTags', []), ('upper', [])]) == "SOME   TEXT"
    assert process("Hello World", [('sanitize', [])]) == "hello-world"
    assert process("a < b", [('escape', [])]) == "a &lt; b"
    assert process("*x*", [('markdown', [])]) == "<p><em>x</em></p>"
    assert process("2020-05-06", [('dateFormat', ['%d/%m/%Y'])]) == "06/05/2020"
    assert process("one two three", [('shorten', ['9', '...'])]) == "one two..."
    assert process("", [('def', ['x'])]) == "x"
    assert process("v", [('unknown', [])]) == "v"

def test_config_overrides(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'MAX_DEPTH', config.MAX_DEPTH)
    monkeypatch.setattr(config, 'DEL_VAR_OPEN', config.DEL_VAR_OPEN)

    path = tmp_path / 'config.yml'
    path.write_text("MAX_DEPTH: 10\nDEL_VAR_OPEN: '{{'\n")
    config.overrides(str(path))
    assert config.MAX_DEPTH == 10 and config.DEL_VAR_OPEN == '{{'

    path.write_text("NO_SUCH_KEY: 1\n")
    with pytest.raises(config.ConfigError):
        config.overrides(str(path))

    path.write_text("MAX_DEPTH: ten\n")
    with pytest.raises(config.ConfigError):
        config.overrides(str(path))
