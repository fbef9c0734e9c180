from hyperpage.content import Page
from hyperpage.site import Site


#####################################################################################################################################################
#####
#####  UTILITIES
#####

def make_site(request = '/blog'):
    pages = [
        Page('/',           {'title': 'Home'}),
        Page('/blog',       {'title': 'Blog'}),
        Page('/blog/a',     {'title': 'Alpha', 'date': '2020-03-01', 'tags': 'x, y', 'body': 'Lorem ipsum'}),
        Page('/blog/b',     {'title': 'Beta',  'date': '2021-01-01', 'tags': 'y', 'hidden': True}),
        Page('/blog/c',     {'title': 'Gamma', 'date': '2019-07-01', 'tags': 'z'}, template = 'post'),
        Page('/blog/c/sub', {'title': 'Sub'}),
        Page('/about',      {'title': 'About', 'tags': 'x'}),
    ]
    return Site(pages, request = request)

def titles(pages):
    return [p.get('title') for p in pages]


#####################################################################################################################################################
#####
#####  TESTS
#####

def test_pagelist_types():
    pagelist = make_site().get_pagelist()
    assert titles(pagelist.get_pages()) == ['Home', 'Blog', 'Alpha', 'Gamma', 'Sub', 'About']

    pagelist.config({'type': 'children'})
    assert titles(pagelist.get_pages()) == ['Alpha', 'Gamma']

    pagelist.config({'type': 'siblings', 'context': '/blog/a'})
    assert titles(pagelist.get_pages()) == ['Gamma']

    pagelist.config({'type': 'related'})
    assert titles(pagelist.get_pages()) == ['About']

def test_breadcrumbs():
    pagelist = make_site('/blog/c/sub').get_pagelist()
    pagelist.config({'type': 'breadcrumbs'})
    assert titles(pagelist.get_pages()) == ['Home', 'Blog', 'Gamma', 'Sub']

def test_pagelist_filters():
    pagelist = make_site().get_pagelist()
    pagelist.config({'type': 'children', 'excludeHidden': False})
    assert titles(pagelist.get_pages()) == ['Alpha', 'Beta', 'Gamma']
    assert pagelist.get_tags() == ['x', 'y', 'z']

    pagelist.config({'filter': 'y'})
    assert titles(pagelist.get_pages()) == ['Alpha', 'Beta']
    assert pagelist.get_tags() == ['x', 'y', 'z']                  # tags are collected before filtering

    pagelist.config({'filter': '', 'template': 'post'})
    assert titles(pagelist.get_pages()) == ['Gamma']

    pagelist.config({'template': '', 'search': 'lorem'})
    assert titles(pagelist.get_pages()) == ['Alpha']

def test_pagelist_sort_and_paging():
    pagelist = make_site().get_pagelist()
    pagelist.config({'type': 'children', 'excludeHidden': False, 'sort': 'date desc'})
    assert titles(pagelist.get_pages()) == ['Beta', 'Alpha', 'Gamma']

    pagelist.config({'sort': 'date asc', 'offset': 1, 'limit': 1})
    assert titles(pagelist.get_pages()) == ['Alpha']
    assert pagelist.count() == 3

def test_pagelist_config_restore():
    pagelist = make_site().get_pagelist()
    cache = pagelist.config()
    pagelist.config({'type': 'children', 'sort': 'title desc', 'unknown': 1})
    assert 'unknown' not in pagelist.config()
    pagelist.config(cache)
    assert pagelist.config() == cache

def test_neighbors():
    pagelist = make_site().get_pagelist()
    pagelist.config({'type': 'children'})
    assert titles(pagelist.neighbors('/blog/a').values()) == ['Gamma']
    assert set(pagelist.neighbors('/blog/a')) == {'next'}
    assert set(pagelist.neighbors('/blog/c')) == {'prev'}
    assert pagelist.neighbors('/nope') == {}

def test_excludes():
    pagelist = make_site('/blog/a').get_pagelist()
    pagelist.config({'type': 'siblings'})
    assert titles(pagelist.get_pages()) == ['Gamma']
    pagelist.config({'type': '', 'excludeCurrent': True})
    assert 'Alpha' not in titles(pagelist.get_pages())

def test_paging_coercion():
    pagelist = make_site().get_pagelist()
    pagelist.config({'type': 'children', 'excludeHidden': False, 'limit': 'all'})
    assert titles(pagelist.get_pages()) == ['Alpha', 'Beta', 'Gamma']

    pagelist.config({'offset': '1st', 'limit': '1 page'})
    assert titles(pagelist.get_pages()) == ['Beta']

    pagelist.config({'offset': 'none', 'limit': '2'})
    assert titles(pagelist.get_pages()) == ['Alpha', 'Beta']
