"""
Grammar of the template language.

A template is static text with embedded constructs of two kinds, delimited by configurable strings:
- variables:    @{ name }  or  @{ name | function(arg, ...) | function }
- statements:   <@ ... @>  -- includes, calls, snippet definitions and block statements (with, for, foreach, if)
Comments <# ... #> are removed from output.

SYNTAX

@{ var }                                        -- value of a field of the current page, a shared field, a runtime variable (:i, :file, ...)
                                                   or a query string parameter (?key)
<@ elements/header.html @>                      -- include of a file, relative to the directory of the current template
<@ name @>  <@ name { key: value, ... } @>      -- call of a snippet, a toolbox method or an extension, with options

<@ snippet name @> ... <@ end @>                -- definition of a snippet

<@ with "/url" @> ... <@ else @> ... <@ end @>  -- switch the context to another page; or to the 1st file matching a declaration;
<@ with prev @> ... <@ end @>                      prev/next: neighbors of the current page in the page list

<@ for 1 to @{ count } @> ... <@ end @>         -- counted loop; :i is the index

<@ foreach pagelist @> ... <@ end @>            -- pages of the page list, each one becomes the context in turn
<@ foreach filters @> ... <@ end @>             -- tags of the pages in the page list (:filter)
<@ foreach tags @> ... <@ end @>                -- tags of the current page (:tag)
<@ foreach filelist @> ... <@ end @>            -- files of the file list (:file, :basename, ...)
<@ foreach "*.jpg" { width: 200 } @> ... <@ else @> ... <@ end @>

<@ if @{ a } = "x" and not @{ b } or @{ c } > 5 @> ... <@ else @> ... <@ end @>
                                                -- terms are combined from left to right, without precedence

Block statements can be nested to any depth; every <@ else @> and <@ end @> belongs to the nearest enclosing block
that is still open. Constructs that can't be parsed are passed to output as plain text.
"""

import re
from collections import namedtuple

from parsimonious.grammar import Grammar as Parsimonious

from hyperpage import config
from hyperpage.errors import ConfigError


#####################################################################################################################################################
#####
#####  GRAMMAR
#####

Delimiters = namedtuple('Delimiters', 'statement_open statement_close var_open var_close comment_open comment_close')


grammar = r"""

document        =  nodes (orphan nodes)*
nodes           =  node*
node            =  comment / statement / variable / text / stray
orphan          =  tag_else / tag_end                               # closing tag without a block, dropped from output

text            =  ~r"(?:(?!%(ANY_OPEN)s).)+"s
stray           =  !tag_else !tag_end ~r"%(ANY_OPEN)s"              # opening delimiter of a construct that doesn't parse, rendered as text
comment         =  ~r"%(COMMENT_OPEN)s.*?%(COMMENT_CLOSE)s"s


###  VARIABLES

variable        =  var_open ws var_name pipe* ws var_close
var_open        =  ~r"%(VAR_OPEN)s"
var_close       =  ~r"%(VAR_CLOSE)s"
var_name        =  ~r"[?:+]?[\w.-]+"

pipe            =  ws "|" ws pipe_name pipe_args?
pipe_name       =  ~r"[A-Za-z_]\w*"
pipe_args       =  ws "(" ws (arg (ws "," ws arg)*)? ws ")"
arg             =  string / number / variable / bare_arg
bare_arg        =  ~r"[^\s,()'\"]+"


###  STATEMENTS

statement       =  block_snippet / block_with / block_foreach / block_for / block_if / include / call

open            =  ~r"%(STATEMENT_OPEN)s" ws
close           =  ws ~r"%(STATEMENT_CLOSE)s"
tag_else        =  open ~r"else"i close
tag_end         =  open ~r"end"i close
else_branch     =  tag_else nodes

block_snippet   =  open ~r"snippet"i space name close nodes tag_end
block_with      =  open ~r"with"i space target options? close nodes else_branch? tag_end
block_foreach   =  open ~r"foreach"i space target options? close nodes else_branch? tag_end
block_for       =  open ~r"for"i space operand space ~r"to"i space operand close nodes tag_end
block_if        =  open ~r"if"i space condition close nodes else_branch? tag_end

include         =  open path close
call            =  open !keyword name options? close

keyword         =  ~r"(?:if|for|foreach|with|snippet|else|end)(?![\w/-])"i
name            =  ~r"[\w/-]+"
path            =  ~r"[\w/.-]+\.\w+"

target          =  string / variable / bare_target
bare_target     =  ~r"(?:(?!%(STATEMENT_CLOSE)s)[^\s{}'\"])+"

options         =  ws "{" opt_part* "}"
opt_part        =  variable / opt_dq_string / opt_sq_string / opt_braces / opt_text / opt_quote
opt_braces      =  "{" opt_part* "}"
opt_dq_string   =  '"' (variable / dq_text)* '"'
opt_sq_string   =  "'" (variable / sq_text)* "'"
opt_text        =  ~r"(?:(?!%(VAR_OPEN)s)[^{}\"'])+"s
opt_quote       =  ~r"[\"']"


###  CONDITIONS

condition       =  term (space logic space term)*
logic           =  ~r"and|or"i
term            =  comparison / boolean
comparison      =  operand ws comp_op ws operand
comp_op         =  "!=" / ">=" / "<=" / "=" / ">" / "<"
boolean         =  negation? operand
negation        =  ~r"not\s+|!(?!=)\s*"i

operand         =  variable / string / number
number          =  ~r"-?\d+(?:\.\d+)?(?![\w.])"

string          =  dq_string / sq_string
dq_string       =  '"' (variable / dq_text)* '"'
sq_string       =  "'" (variable / sq_text)* "'"
dq_text         =  ~r'(?:\\.|(?!%(VAR_OPEN)s)[^"\\])+'s
sq_text         =  ~r"(?:\\.|(?!%(VAR_OPEN)s)[^'\\])+"s


###  WHITESPACE

ws              =  ~r"\s*"
space           =  ~r"\s+"

"""


class Grammar(Parsimonious):
    """
    Grammar of templates compiled for a particular set of delimiters.
    Instances are cached: use Grammar.get() instead of creating new ones.
    """

    _cache = {}         # {Delimiters: Grammar}

    delimiters = None

    def __init__(self, delimiters):
        for delim in delimiters:
            if not delim: raise ConfigError("template delimiters must be non-empty")
            if set(delim) & set('"\''): raise ConfigError(f"template delimiters must not contain quotes: {delim}")

        self.delimiters = delimiters
        d = delimiters
        placeholders = {
            'STATEMENT_OPEN':   re.escape(d.statement_open),
            'STATEMENT_CLOSE':  re.escape(d.statement_close),
            'VAR_OPEN':         re.escape(d.var_open),
            'VAR_CLOSE':        re.escape(d.var_close),
            'COMMENT_OPEN':     re.escape(d.comment_open),
            'COMMENT_CLOSE':    re.escape(d.comment_close),
            'ANY_OPEN':         '|'.join(re.escape(s) for s in (d.statement_open, d.var_open, d.comment_open)),
        }
        super(Grammar, self).__init__(grammar % placeholders)

    @staticmethod
    def current_delimiters():
        """Delimiters defined in the current configuration."""
        return Delimiters(config.DEL_STATEMENT_OPEN, config.DEL_STATEMENT_CLOSE,
                          config.DEL_VAR_OPEN, config.DEL_VAR_CLOSE,
                          config.DEL_COMMENT_OPEN, config.DEL_COMMENT_CLOSE)

    @classmethod
    def get(cls, delimiters = None):
        """Grammar for a given set of delimiters, or for the configured ones if `delimiters` is None."""
        if delimiters is None:
            delimiters = cls.current_delimiters()
        gram = cls._cache.get(delimiters)
        if gram is None:
            gram = cls._cache[delimiters] = cls(delimiters)
        return gram
