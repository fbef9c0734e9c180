"""
Pipe functions: post-processing of variable values in templates, like in:

    @{ title | stripTags | shorten(60) | def('Untitled') }

Every function takes the current value as the 1st argument, followed by arguments listed in the template,
and returns a new value. Functions are applied from left to right.
"""

import re, json, html, logging, unicodedata
from datetime import datetime

import markdown as _markdown

from hyperpage import config


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  UTILITIES
#####

def to_string(value):
    """Convert a field value to a string for embedding in output."""
    if value is None or value is False: return ''
    if value is True: return 'true'
    if isinstance(value, str): return value
    if isinstance(value, datetime): return value.strftime(config.DATE_FORMAT)
    if isinstance(value, (list, tuple)): return ', '.join(map(to_string, value))
    if isinstance(value, dict): return json.dumps(value, ensure_ascii = False, default = str)
    return str(value)

def to_int(value, default = 0):
    """Leading integer of the value, like in "12px" -> 12; `default` if there's none."""
    match = re.match(r'\s*([+-]?\d+)', to_string(value))
    return int(match.group(1)) if match else default

def _to_datetime(value):
    if isinstance(value, datetime): return value
    text = to_string(value).strip()
    if not text: return None
    if re.fullmatch(r'\d+(\.\d+)?', text):
        return datetime.fromtimestamp(float(text))
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


#####################################################################################################################################################
#####
#####  BUILT-IN PIPE FUNCTIONS
#####

PIPES = {}

def pipe(name):
    """Decorator that registers a function in PIPES under a given name."""
    def register(fun):
        PIPES[name] = fun
        return fun
    return register


@pipe('def')
def default(value, fallback = ''):
    """`fallback` if the value is empty (or whitespace only), otherwise the value unchanged."""
    return value if to_string(value).strip() else fallback

@pipe('escape')
def escape(value):
    return html.escape(to_string(value))

@pipe('stripTags')
def strip_tags(value):
    return re.sub(r'<[^>]*>', '', to_string(value))

@pipe('shorten')
def shorten(value, maxchars = 100, ellipsis = ' ...'):
    """Plain text of the value (tags stripped, whitespace merged) cut at a word boundary to at most `maxchars` characters."""
    text = re.sub(r'\s+', ' ', strip_tags(value)).strip()
    maxchars = int(float(maxchars))
    if len(text) <= maxchars:
        return text
    cut = text[:maxchars + 1].rsplit(' ', 1)[0] if ' ' in text[:maxchars + 1] else text[:maxchars]
    return cut.rstrip() + ellipsis

@pipe('sanitize')
def sanitize(value, remove_dots = False, maxchars = 100):
    """Convert the value to a URL-safe slug of lowercase ASCII letters, digits and dashes."""
    text = unicodedata.normalize('NFKD', to_string(value)).encode('ascii', 'ignore').decode('ascii').lower()
    allowed = r'[^a-z0-9]+' if remove_dots and remove_dots != 'false' else r'[^a-z0-9\.]+'
    text = re.sub(allowed, '-', text).strip('-')
    return text[:int(float(maxchars))].strip('-')

@pipe('lower')
def lower(value):
    return to_string(value).lower()

@pipe('upper')
def upper(value):
    return to_string(value).upper()

@pipe('replace')
def replace(value, old = '', new = ''):
    if not old: return to_string(value)
    return to_string(value).replace(old, new)

@pipe('markdown')
def markdown(value):
    return _markdown.markdown(to_string(value))

@pipe('dateFormat')
def date_format(value, format = None):
    date = _to_datetime(value)
    if date is None: return to_string(value)
    return date.strftime(format or config.DATE_FORMAT)


#####################################################################################################################################################
#####
#####  PROCESSING
#####

def process(value, pipes):
    """Apply a list of pipe functions, given as (name, args) pairs, to `value`. Unknown functions are skipped."""
    for name, args in pipes:
        fun = PIPES.get(name)
        if fun is None:
            log.warning("unknown pipe function '%s'", name)
            continue
        value = fun(value, *args)
    return value
