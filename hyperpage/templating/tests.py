"""
Run:
$
$  pytest -v hyperpage/templating/tests.py

"""

import json, pytest

from PIL import Image

from hyperpage import config
from hyperpage.content import Page, Shared
from hyperpage.errors import ExtensionError, TemplateSyntaxError
from hyperpage.site import Site
from hyperpage.templating.interpreter import Interpreter
from hyperpage.templating.structs import Context, Runtime


#####################################################################################################################################################
#####
#####  UTILITIES
#####

def echo(options, site):
    """Extension that outputs its options, for inspection."""
    return json.dumps(options, sort_keys = True)

def sample_pages():
    return [
        Page('/',       {'title': 'Home'}),
        Page('/blog',   {'title': 'Blog'}),
        Page('/blog/a', {'title': 'Post A', 'tags': 'python, web', 'count': '3'}),
        Page('/blog/b', {'title': 'Post B', 'tags': 'web', 'hidden': True}),
        Page('/blog/c', {'title': 'Post C', 'tags': 'art'}),
        Page('/about',  {'title': 'About', 'quote': 'Say "hi"'}),
    ]

def make_site(request = '/blog/a', pages = None, **kwargs):
    kwargs.setdefault('extensions', {'echo': echo})
    return Site(pages if pages is not None else sample_pages(), Shared({'sitename': 'Demo'}), request = request, **kwargs)

def render(src, site = None, directory = None, **kwargs):
    site = site or make_site(**kwargs)
    return Interpreter(site).interpret(src, directory)

def save_image(path, size = (40, 20)):
    path.parent.mkdir(parents = True, exist_ok = True)
    Image.new('RGB', size, 'red').save(str(path))


#####################################################################################################################################################
#####
#####  TESTS
#####

def test_001_static():
    assert render("") == ""
    assert render("Hello <b>world</b>") == "Hello <b>world</b>"
    src = "mail me: joe@example.com { not a variable } <br/>\n"
    assert render(src) == src                                   # text without constructs is returned unchanged

def test_002_variables():
    assert render("@{ title }") == "Post A"
    assert render("@{title}!") == "Post A!"
    assert render("@{ sitename }") == "Demo"                   # fallback to shared data
    assert render("[@{ missing }]") == "[]"
    assert render("@{ url } @{ :level } @{ :parent }") == "/blog/a 2 /blog"
    assert render("@{ :current }|@{ :currentPath }") == "true|true"
    assert render("@{ :basename }") == "a"
    assert render("@{ ?q }", query = {'q': '<b>'}) == "&lt;b&gt;"
    assert render("[@{ ?missing }]") == "[]"

def test_003_pipes():
    assert render("@{ title | upper }") == "POST A"
    assert render("@{ missing | def('none') }") == "none"
    assert render("@{ missing | def(@{ title }) }") == "Post A"
    assert render("@{ title | replace('Post', 'Entry') | lower }") == "entry a"
    assert render("@{ title | shorten(4) }") == "Post ..."
    assert render("@{ title | nosuchpipe }") == "Post A"

def test_004_comments_and_stray_delimiters():
    assert render("a<# hidden @{ title } <@ if @> #>b") == "ab"
    assert render("a <@ b c @> d") == "a <@ b c @> d"
    assert render("@{ } @{") == "@{ } @{"
    assert render("x <@ end @> y <@ else @>z") == "x  y z"           # closing tags without an opening block are dropped
    assert render("<@ if @{ title } @>unclosed") == "<@ if Post A @>unclosed"

def test_005_includes(tmp_path):
    (tmp_path / 'inc' / 'sub').mkdir(parents = True)
    (tmp_path / 'inc' / 'part.html').write_text("Part @{ title } <@ sub/inner.html @>")
    (tmp_path / 'inc' / 'sub' / 'inner.html').write_text("Inner <@ sibling.html @>")
    (tmp_path / 'inc' / 'sub' / 'sibling.html').write_text("Sibling")

    assert render("<@ part.html @>", directory = str(tmp_path / 'inc')) == "Part Post A Inner Sibling"
    assert render("[<@ missing.html @>]", directory = str(tmp_path / 'inc')) == "[]"

def test_006_include_depth_guard(tmp_path):
    (tmp_path / 'loop.html').write_text("x<@ loop.html @>")
    out = render("<@ loop.html @>", directory = str(tmp_path))
    assert out == "x" * (config.MAX_DEPTH - 1)

def test_007_call_options():
    assert render('<@ echo @>') == '{}'
    assert render('<@ echo { "a": @{ title }, "b": "x @{ title }" } @>') == '{"a": "Post A", "b": "x Post A"}'
    assert render('<@ echo { "q": @{ quote } } @>', request = '/about') == json.dumps({'q': 'Say "hi"'})
    assert render('<@ echo { a: 1, b: hello, c: { d: true } } @>') == '{"a": 1, "b": "hello", "c": {"d": true}}'
    assert render('<@ echo { a: [ } @>') == '{}'                    # malformed options

def test_008_snippets():
    src = "<@ snippet greet @>Hi @{ title }!<@ end @>[<@ greet @>]"
    assert render(src) == "[Hi Post A!]"

    # a snippet can be called only after its definition was rendered
    src = "[<@ teaser @>]<@ snippet teaser @>T<@ end @>[<@ teaser @>]"
    assert render(src) == "[][T]"

    # later definitions replace earlier ones
    src = "<@ snippet s @>1<@ end @><@ s @><@ snippet s @>2<@ end @><@ s @>"
    assert render(src) == "12"

    # snippets take precedence over toolbox methods
    assert render("<@ snippet date @>SNIP<@ end @><@ date @>") == "SNIP"
    assert render('<@ date { date: "2021-03-04", format: "%d.%m.%Y" } @>') == "04.03.2021"

def test_009_unknown_calls():
    assert render("[<@ no_such_extension_xyz @>]") == "[]"
    site = make_site(extensions = {'bad': 'not callable'})
    with pytest.raises(ExtensionError):
        render("<@ bad @>", site = site)

def test_010_with_page():
    src = '@{ title } <@ with "/about" @>@{ title }<@ end @> @{ title }'
    assert render(src) == "Post A About Post A"
    assert render('<@ with /about @>@{ title }<@ end @>') == "About"

    # context is restored after the block even if the body switched it many times
    src = '<@ with "/about" @><@ with "/" @>@{ title }<@ end @>@{ title }<@ end @>@{ title }'
    assert render(src) == "HomeAboutPost A"

    assert render('<@ with "/nope" @>yes<@ else @>no<@ end @>') == "no"
    assert render('<@ with "/nope" @>yes<@ end @>') == ""

def test_011_with_prev_next():
    # prev/next reach hidden pages; configuration of the page list is restored afterwards
    src = "<@ with prev @>@{ title }<@ end @>|<@ with next @>@{ title }<@ end @>|@{ :pagelistCount }"
    assert render(src, request = '/blog/c') == "Post B|About|5"
    assert render("<@ with prev @>x<@ else @>none<@ end @>", request = '/') == "none"

def test_012_for():
    assert render("<@ for 1 to 3 @>@{ :i },<@ end @>") == "1,2,3,"
    assert render("<@ for 5 to 3 @>x<@ end @>") == ""
    assert render("<@ for 2 to @{ count } @>@{ :i }<@ end @>") == "23"
    assert render('<@ for "abc" to 2 @>@{ :i }<@ end @>') == "012"        # non-numeric bounds become 0
    assert render('<@ for "2px" to "3" @>@{ :i }<@ end @>') == "23"

def test_013_runtime_restored():
    src = "<@ for 1 to 2 @>[@{ :i }:<@ for 5 to 6 @>@{ :i }<@ end @>:@{ :i }]<@ end @>(@{ :i })"
    assert render(src) == "[1:56:1][2:56:2]()"

def test_014_foreach_pagelist():
    src = '<@ pagelist { type: "children" } @><@ foreach pagelist @>@{ :i }.@{ title } <@ end @>@{ title }'
    assert render(src, request = '/blog') == "1.Post A 2.Post C Blog"

    # changes of the page list made inside the loop body are undone after every iteration
    src = '<@ pagelist { type: "children" } @><@ foreach pagelist @><@ pagelist { filter: "art" } @>@{ title };<@ end @>@{ :pagelistCount }'
    assert render(src, request = '/blog') == "Post A;Post C;2"

    src = '<@ pagelist { type: "children", limit: 1 } @>@{ :pagelistCount }/@{ :pagelistDisplayCount }'
    assert render(src, request = '/blog') == "2/1"

def test_015_foreach_nested():
    src = '<@ pagelist { type: "children" } @>' \
          '<@ foreach pagelist @>(@{ :i }<@ foreach tags @>[@{ :i }@{ :tag }]<@ end @>@{ :i })<@ end @>'
    assert render(src, request = '/blog') == "(1[1python][2web]1)(2[1art]2)"

def test_016_foreach_tags_filters():
    src = '<@ pagelist { type: "children" } @><@ foreach filters @>@{ :filter },<@ end @>'
    assert render(src, request = '/blog') == "art,python,web,"
    assert render("<@ foreach tags @>@{ :tag }|<@ end @>") == "python|web|"
    assert render("<@ foreach tags @>x<@ else @>none<@ end @>", request = '/about') == "none"
    assert render('<@ foreach "*.png" @>x<@ else @>none<@ end @>') == "none"

def test_017_files(tmp_path):
    save_image(tmp_path / 'pages' / 'blog' / 'a' / 'one.png')
    save_image(tmp_path / 'pages' / 'blog' / 'a' / 'two.png')
    (tmp_path / 'pages' / 'blog' / 'a' / 'notes.txt').write_text("notes")
    site = lambda: make_site(base_dir = str(tmp_path))

    src = '<@ foreach "*.png" @>@{ :i }:@{ :basename }:@{ :width }x@{ :height };<@ end @>@{ :basename }'
    assert render(src, site = site()) == "1:one.png:40x20;2:two.png:40x20;a"

    src = '<@ foreach "*.png" { width: 20 } @>@{ :widthResized }x@{ :heightResized };<@ end @>'
    assert render(src, site = site()) == "20x10;20x10;"
    resized = render('<@ with "one.png" { width: 20 } @>@{ :fileResized }<@ end @>', site = site())
    assert resized.startswith('/cache/images/one-20x10')
    assert (tmp_path / resized.lstrip('/')).is_file()

    assert render('<@ with "*.txt" @>@{ :file }<@ end @>', site = site()) == "/pages/blog/a/notes.txt"
    assert render('<@ foreach filelist @>@{ :basename } <@ end @>@{ :filelistCount }', site = site()) == "one.png two.png 2"
    assert render('<@ filelist { glob: "*.txt" } @>@{ :filelistCount }', site = site()) == "1"

def test_018_img(tmp_path):
    save_image(tmp_path / 'pages' / 'blog' / 'a' / 'one.png')
    site = make_site(base_dir = str(tmp_path))
    out = render('<@ img { file: "one.png", alt: "One" } @>', site = site)
    assert out == '<img src="/pages/blog/a/one.png" width="40" height="20" alt="One">'
    out = render('<@ img { file: "one.png", height: 10 } @>', site = site)
    assert out.startswith('<img src="/cache/images/one-20x10') and 'width="20" height="10"' in out
    assert render('<@ img { file: "none.png" } @>', site = site) == ""

def test_019_if():
    assert render('<@ if "a" = "a" and "b" != "c" @>T<@ else @>F<@ end @>') == "T"
    # left-to-right evaluation without precedence: ((T or F) and F)
    assert render('<@ if "a" = "a" or "b" = "c" and "x" = "y" @>T<@ else @>F<@ end @>') == "F"
    assert render('<@ if "x" = "y" and "a" = "b" or "a" = "a" @>T<@ else @>F<@ end @>') == "T"

    assert render('<@ if @{ title } @>yes<@ end @>') == "yes"
    assert render('<@ if not @{ missing } @>empty<@ end @>') == "empty"
    assert render('<@ if !@{ title } @>x<@ else @>y<@ end @>') == "y"
    assert render('<@ if @{ missing } @>x<@ end @>') == ""
    assert render('<@ if @{ count } >= 3 @>many<@ end @>') == "many"
    assert render('<@ if @{ title } = "Post A" @>ok<@ end @>') == "ok"

def test_020_if_comparison_types():
    assert render('<@ if "10" > "9" @>T<@ else @>F<@ end @>') == "T"         # numeric
    assert render('<@ if "10" > "1a" @>T<@ else @>F<@ end @>') == "F"        # string
    assert render('<@ if "2.50" = 2.5 @>T<@ else @>F<@ end @>') == "T"

def test_021_nested_blocks():
    src = '<@ if "a" = "a" @>A<@ if "b" = "c" @>B<@ else @>C<@ end @>D<@ else @>E<@ end @>'
    assert render(src) == "ACD"
    src = '<@ if "a" = "b" @>A<@ if "b" = "b" @>B<@ end @><@ else @>E<@ end @>'
    assert render(src) == "E"
    src = '<@ for 1 to 2 @><@ if @{ :i } = 2 @>two<@ else @>one<@ end @>,<@ end @>'
    assert render(src) == "one,two,"

def test_022_strings():
    assert render(r'<@ if "Say \"hi\"" = @{ quote } @>eq<@ end @>', request = '/about') == "eq"
    assert render(r"""<@ if 'it\'s' = "it's" @>eq<@ end @>""") == "eq"
    assert render("<@ with '/about' @>@{ title }<@ end @>") == "About"
    assert render('<@ with "/@{ missing }about" @>@{ title }<@ end @>') == "About"

def test_023_custom_delimiters(monkeypatch):
    monkeypatch.setattr(config, 'DEL_STATEMENT_OPEN', '{%')
    monkeypatch.setattr(config, 'DEL_STATEMENT_CLOSE', '%}')
    monkeypatch.setattr(config, 'DEL_VAR_OPEN', '{{')
    monkeypatch.setattr(config, 'DEL_VAR_CLOSE', '}}')
    assert render("{{ title }} {% if {{ title }} %}yes{% end %} <@ x @>") == "Post A yes <@ x @>"

def test_024_structs():
    home, about = Page('/'), Page('/about')
    ctx = Context(home)
    ctx.push(about)
    assert ctx.get() is about and ctx.depth == 2
    ctx.pop()
    assert ctx.get() is home
    with pytest.raises(IndexError):
        ctx.pop()

    runtime = Runtime(make_site())
    shelf = runtime.shelve()
    runtime.set(config.KEY_INDEX, 5)
    assert runtime.is_runtime_var(config.KEY_INDEX) and runtime.get(config.KEY_INDEX) == 5
    runtime.unshelve(shelf)
    assert not runtime.is_runtime_var(config.KEY_INDEX)
    assert runtime.get(config.KEY_PAGELIST_COUNT) == 5
    with pytest.raises(KeyError):
        runtime.set('title', 'x')

def test_025_syntax_error_position():
    ex = TemplateSyntaxError("unexpected text", "ab\ncde", 5, "page.html")
    assert (ex.line, ex.column) == (2, 3)
    assert str(ex) == "unexpected text in 'page.html', line 2, column 3"

def test_026_if_zero_is_false():
    src = '<@ pagelist { type: "children" } @><@ if @{ :pagelistCount } @>has<@ else @>none<@ end @>'
    assert render(src, request = '/about') == "none"
    assert render(src, request = '/blog') == "has"

    site = make_site('/', pages = [Page('/', {'flag': '0', 'other': 0})])
    assert render('<@ if @{ flag } @>on<@ else @>off<@ end @>', site = site) == "off"
    assert render('<@ if not @{ other } @>off<@ end @>', site = site) == "off"
    assert render('<@ if 0 @>T<@ else @>F<@ end @>') == "F"
    assert render('<@ if "0.0" @>T<@ else @>F<@ end @>') == "T"

def test_027_renamed_runtime_variables(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'KEY_INDEX', config.KEY_INDEX)
    path = tmp_path / 'config.yml'
    path.write_text("KEY_INDEX: ':n'\n")
    config.overrides(str(path))

    assert render('<@ for 1 to 2 @>@{ :n }<@ end @>') == "12"
    assert render('<@ foreach pagelist { type: "children" } @>@{ :n }<@ end @>', request = '/blog') == "12"

def test_028_options_quoted_braces():
    assert render('<@ echo { "a": "x}" } @>') == '{"a": "x}"}'
    assert render("<@ echo { a: '{y}', b: \"@{ title }}\" } @>") == '{"a": "{y}", "b": "Post A}"}'
    assert render('<@ echo { "a": "x" } @>after') == '{"a": "x"}after'
