"""
Global configuration.
Values defined here are module-level defaults; they can be replaced at startup with overrides(), which reads
a YAML file of {NAME: value} pairs.
"""

import yaml

from hyperpage.errors import ConfigError


#####################################################################################################################################################
#####
#####  TEMPLATE SYNTAX
#####

DEL_STATEMENT_OPEN  = '<@'
DEL_STATEMENT_CLOSE = '@>'
DEL_VAR_OPEN        = '@{'
DEL_VAR_CLOSE       = '}'
DEL_COMMENT_OPEN    = '<#'
DEL_COMMENT_CLOSE   = '#>'

QUERY_PREFIX        = '?'           # variables starting with this prefix are read from the query string of the request

MAX_DEPTH           = 64            # max. no. of nested includes & snippet calls; deeper constructs render as empty strings


#####################################################################################################################################################
#####
#####  RESERVED VARIABLES
#####

# runtime variables: set by loops and "with" statements only
KEY_INDEX           = ':i'
KEY_TAG             = ':tag'
KEY_FILTER          = ':filter'
KEY_FILE            = ':file'
KEY_BASENAME        = ':basename'
KEY_FILE_RESIZED    = ':fileResized'
KEY_WIDTH           = ':width'
KEY_HEIGHT          = ':height'
KEY_WIDTH_RESIZED   = ':widthResized'
KEY_HEIGHT_RESIZED  = ':heightResized'

# runtime variables computed on request from the current page list / file list
KEY_PAGELIST_COUNT          = ':pagelistCount'
KEY_PAGELIST_DISPLAY_COUNT  = ':pagelistDisplayCount'
KEY_FILELIST_COUNT          = ':filelistCount'

# page fields, either stored in page data upon creation or computed on request
KEY_URL             = 'url'
KEY_TAGS            = 'tags'
KEY_HIDDEN          = 'hidden'
KEY_PATH            = ':path'
KEY_LEVEL           = ':level'
KEY_PARENT          = ':parent'
KEY_TEMPLATE        = ':template'
KEY_CURRENT_PAGE    = ':current'
KEY_CURRENT_PATH    = ':currentPath'
KEY_MTIME           = ':mtime'


#####################################################################################################################################################
#####
#####  CONTENT & FILES
#####

DIR_PAGES           = '/pages'
DIR_SHARED          = '/shared'
DIR_TEMPLATES       = '/templates'
DIR_CACHE           = '/cache'

DATA_FILE_EXT       = '.yml'
SHARED_DATA_FILE    = 'data.yml'

TEMPLATE_DEFAULT    = 'page'
TEMPLATE_EXT        = '.html'

IMAGE_EXTENSIONS    = ['jpg', 'jpeg', 'png', 'gif']
FILELIST_GLOB       = '*.jpg, *.jpeg, *.png, *.gif'

DATE_FORMAT         = '%Y-%m-%d %H:%M:%S'

GENERATOR           = 'hyperpage'


#####################################################################################################################################################
#####
#####  OVERRIDES
#####

def overrides(path):
    """
    Replace default values of configuration constants with the ones found in a YAML file at `path`.
    The file must contain a mapping of constant names to values. Unknown names and values whose type
    differs from the default's are rejected with ConfigError.
    """
    with open(path, encoding = 'utf-8') as f:
        values = yaml.safe_load(f) or {}

    if not isinstance(values, dict):
        raise ConfigError(f"configuration file '{path}' must contain a mapping, not {type(values).__name__}")

    module = globals()
    for name, value in values.items():
        if not name.isupper() or name not in module:
            raise ConfigError(f"unknown configuration key '{name}' in '{path}'")
        default = module[name]
        if type(value) is not type(default):
            raise ConfigError(f"configuration key '{name}' must be of type {type(default).__name__}, not {type(value).__name__}")
        module[name] = value

    return values
