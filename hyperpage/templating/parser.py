"""
Syntax tree of templates and its rendering.

Every node class implements render(state) and/or evaluate(state), where `state` is the Interpreter
of the current page rendering: it provides access to the Context, Runtime scope, snippets, the Site and files.
"""

import re, json, logging, operator
from functools import lru_cache

import yaml

from hyperpage import config
from hyperpage.pipes import to_string, to_int, process
from hyperpage.templating.grammar import Grammar
from hyperpage.templating.tree import BaseTree


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  UTILITIES
#####

def asnumber(value):
    """Float value of a numeric string, or None if `value` doesn't look like a number."""
    text = to_string(value).strip()
    if not re.fullmatch(r'[+-]?(\d+(\.\d*)?|\.\d+)', text): return None
    return float(text)

def unescape(text):
    """Remove backslashes that escape characters in quoted strings."""
    return re.sub(r'\\(.)', r'\1', text, flags = re.S)

def parse_options(text):
    """
    Decode options of a statement, {...}, as JSON or, if that fails, as YAML (which accepts unquoted keys).
    Malformed options, or ones that don't decode to a dict, are replaced with {}.
    """
    if not text: return {}
    try:
        options = json.loads(text)
    except ValueError:
        try:
            options = yaml.safe_load(text)
        except yaml.YAMLError:
            options = None

    if not isinstance(options, dict):
        log.warning("malformed options ignored: %s", text)
        return {}
    return options

OPERATORS = {
    '=':    operator.eq,
    '!=':   operator.ne,
    '>':    operator.gt,
    '>=':   operator.ge,
    '<':    operator.lt,
    '<=':   operator.le,
}

def compare(left, op, right):
    """Compare two values numerically if both are numbers, or as strings otherwise."""
    l, r = asnumber(left), asnumber(right)
    if l is not None and r is not None:
        left, right = l, r
    else:
        left, right = to_string(left), to_string(right)
    return OPERATORS[op](left, right)

def is_empty(value):
    """True if the value counts as false in a condition: an empty string or "0"."""
    return to_string(value) in ('', '0')


#####################################################################################################################################################
#####
#####  NODES
#####

class NODES(object):
    """A lexical container for definitions of all template tree node classes."""

    ###  BASE NODES  ###

    class node(BaseTree.node):

        @staticmethod
        def _render_all(nodes, state):
            return ''.join(n.render(state) for n in nodes)

        def render(self, state):
            return self._render_all(self.children, state)

    class static(node):
        """A node that represents a fixed piece of text."""
        value = None
        def setup(self):            self.value = self.text()
        def render(self, state):    return self.value
        def evaluate(self, state):  return self.value
        def __str__(self):          return self.value

    class xdocument(node): pass
    class xnodes(node): pass

    class xtext(static): pass
    class xstray(static): pass

    class xcomment(node):
        def render(self, state): return ''


    ###  VARIABLES  ###

    class xvariable(node):
        """Occurrence of a variable, optionally followed by pipe functions."""
        name  = None
        pipes = None

        def setup(self):
            self.name  = self.children[0].value
            self.pipes = self.children[1:]

        def evaluate(self, state):
            value = state.get_value(self.name)
            if self.pipes:
                value = process(value, [(p.name, [arg.evaluate(state) for arg in p.args]) for p in self.pipes])
            return to_string(value)

        render = evaluate

    class xvar_name(static): pass

    class xpipe(node):
        name = None
        args = None
        def setup(self):
            self.name = self.children[0].value
            self.args = self.children[1:]

    class xpipe_name(static): pass
    class xbare_arg(static): pass
    class xnumber(static): pass

    class spliced(node):
        """
        A piece of text with embedded variables. Variables are the only children; the text between them is static
        and gets converted with static(). The value is a string where variables are replaced with their values.
        """
        def span(self):
            return self.pos

        def static(self, text):
            return text

        def evaluate(self, state):
            start, end = self.span()
            out = []
            for var in self.children:
                out.append(self.static(self.fulltext[start:var.pos[0]]))
                out.append(var.evaluate(state))
                start = var.pos[1]
            out.append(self.static(self.fulltext[start:end]))
            return ''.join(out)

    class string(spliced):
        """Quoted string: quotes are dropped, backslash escapes are removed from static text."""
        def span(self):
            return self.pos[0] + 1, self.pos[1] - 1
        def static(self, text):
            return unescape(text)

    class xdq_string(string): pass
    class xsq_string(string): pass

    class xoptions(spliced):
        """
        Options of a statement, {...}, evaluated to a dict. Values of variables are escaped for JSON;
        a variable that constitutes an entire value (": @{x}," or ": @{x}}") is additionally put in quotes.
        """
        def evaluate(self, state):
            start, end = self.pos
            out = []
            for i, var in enumerate(self.children):
                before = self.fulltext[start:var.pos[0]]
                after  = self.fulltext[var.pos[1]:self.children[i+1].pos[0] if i + 1 < len(self.children) else end]
                value  = json.dumps(var.evaluate(state), ensure_ascii = False)[1:-1]
                if re.search(r':\s*$', before) and re.match(r'\s*[,}]', after):
                    value = '"%s"' % value
                out += [before, value]
                start = var.pos[1]
            out.append(self.fulltext[start:end])
            return parse_options(''.join(out).strip())


    ###  STATEMENTS  ###

    class xname(static): pass
    class xpath(static): pass
    class xbare_target(static): pass

    class xinclude(node):
        path = None
        def setup(self):
            self.path = self.children[0].value
        def render(self, state):
            return state.include(self.path)

    class xcall(node):
        """Call of a snippet, a toolbox method or an extension."""
        name    = None
        options = None
        def setup(self):
            self.name = self.children[0].value
            if len(self.children) > 1:
                self.options = self.children[1]
        def render(self, state):
            options = self.options.evaluate(state) if self.options else {}
            return state.call(self.name, options)

    class xblock_snippet(node):
        name = None
        body = None
        def setup(self):
            self.name, self.body = self.children[0].value, self.children[1]
        def render(self, state):
            if self.name in state.snippets: log.debug("snippet '%s' redefined", self.name)
            state.snippets[self.name] = self.body
            return ''


    ###  BLOCKS  ###

    class block(node):
        """Base class for with/foreach blocks: a target, optional options, a body and an optional else-body."""
        target   = None
        options  = None
        body     = None
        elsebody = None

        def setup(self):
            self.target, *rest = self.children
            if rest[0].type == 'options':
                self.options, *rest = rest
            self.body = rest[0]
            if len(rest) > 1:
                self.elsebody = rest[1]

        def keyword(self):
            """Lowercase name of the target if it's an unquoted word (like: pagelist, prev), otherwise None."""
            return self.target.value.lower() if self.target.type == 'bare_target' else None

        def _render_else(self, state):
            return self.elsebody.render(state) if self.elsebody else ''

    class xblock_with(block):
        """
        Switch the context to a page, or to a file. The target is either a URL of a page, a keyword prev/next
        (neighbors of the current page in the page list), or a file declaration: then the 1st matching file is processed.
        """
        def render(self, state):
            site, context = state.site, state.context
            url  = self.target.evaluate(state)
            page = None

            if self.keyword() in ('prev', 'next'):
                pagelist = site.get_pagelist()
                cache = pagelist.config()
                pagelist.config({'excludeHidden': False})
                try:
                    page = pagelist.neighbors(context.get().url).get(self.keyword())
                finally:
                    pagelist.config(cache)

            if url in site.get_collection():
                page = site.get_page(url)

            if page is not None:
                context.push(page)
                try:
                    return self.body.render(state)
                finally:
                    context.pop()

            files = state.resolve_files(url, first_only = True)
            if files:
                options = self.options.evaluate(state) if self.options else {}
                return state.process_file(files[0], options, self.body)

            return self._render_else(state)

    class xblock_foreach(block):
        """
        Loop over pages of the page list ("pagelist"), tags of pages in the page list ("filters"),
        tags of the current page ("tags"), files of the file list ("filelist"), or files matching a declaration.
        The index of iteration, starting at 1, is available as :i. The else-body is rendered if there were no iterations.
        """
        def render(self, state):
            keyword = self.keyword()
            runtime = state.runtime
            shelf   = runtime.shelve()
            out     = []
            try:
                if keyword == 'pagelist':
                    count = self._loop_pages(state, out)
                elif keyword == 'filters':
                    count = self._loop_values(state, out, config.KEY_FILTER, state.site.get_pagelist().get_tags())
                elif keyword == 'tags':
                    count = self._loop_values(state, out, config.KEY_TAG, state.context.get().tags)
                else:
                    count = self._loop_files(state, out, keyword)
            finally:
                runtime.unshelve(shelf)

            if not count:
                out.append(self._render_else(state))
            return ''.join(out)

        def _loop_pages(self, state, out):
            context  = state.context
            pagelist = state.site.get_pagelist()
            count    = 0

            context.push(context.get())
            try:
                for page in pagelist.get_pages():
                    cache = pagelist.config()
                    count += 1
                    context.set(page)
                    state.runtime.set(config.KEY_INDEX, count)
                    try:
                        out.append(self.body.render(state))
                    finally:
                        pagelist.config(cache)              # the body may reconfigure the page list, which must be undone
            finally:
                context.pop()
            return count

        def _loop_values(self, state, out, key, values):
            count = 0
            for value in values:
                count += 1
                state.runtime.set(key, value)
                state.runtime.set(config.KEY_INDEX, count)
                out.append(self.body.render(state))
            return count

        def _loop_files(self, state, out, keyword):
            if keyword == 'filelist':
                files = state.site.get_filelist().get_files()
            else:
                files = state.resolve_files(self.target.evaluate(state))
            options = self.options.evaluate(state) if self.options else {}
            count = 0
            for file in files:
                count += 1
                state.runtime.set(config.KEY_INDEX, count)
                out.append(state.process_file(file, options, self.body))
            return count

    class xblock_for(node):
        """Counted loop from `start` to `end`, inclusive; :i holds the current value."""
        start = None
        end   = None
        body  = None

        def setup(self):
            self.start, self.end, self.body = self.children

        def render(self, state):
            start = to_int(self.start.evaluate(state))
            end   = to_int(self.end.evaluate(state))
            shelf = state.runtime.shelve()
            out   = []
            try:
                for i in range(start, end + 1):
                    state.runtime.set(config.KEY_INDEX, i)
                    out.append(self.body.render(state))
            finally:
                state.runtime.unshelve(shelf)
            return ''.join(out)

    class xblock_if(node):
        test     = None         # <condition> node
        body     = None
        elsebody = None

        def setup(self):
            self.test, self.body, *rest = self.children
            if rest: self.elsebody = rest[0]

        def render(self, state):
            if self.test.evaluate(state):
                return self.body.render(state)
            if self.elsebody:
                return self.elsebody.render(state)
            return ''


    ###  CONDITIONS  ###

    class xcondition(node):
        """
        Chain of terms joined with "and" / "or". The chain is evaluated from left to right, without precedence
        of operators: a or b and c == (a or b) and c.
        """
        def evaluate(self, state):
            result = self.children[0].evaluate(state)
            rest = self.children[1:]
            for logic, term in zip(rest[::2], rest[1::2]):
                partial = term.evaluate(state)
                result = (result and partial) if logic.value.lower() == 'and' else (result or partial)
            return result

    class xlogic(static): pass
    class xcomp_op(static): pass
    class xnegation(static): pass

    class xcomparison(node):
        def setup(self):
            self.left, self.op, self.right = self.children
        def evaluate(self, state):
            return compare(self.left.evaluate(state), self.op.value, self.right.evaluate(state))

    class xboolean(node):
        """A value is true unless it's empty or "0". Can be negated with "not" or "!"."""
        negated = False
        def setup(self):
            self.negated = (self.children[0].type == 'negation')
            self.operand = self.children[-1]
        def evaluate(self, state):
            value = not is_empty(self.operand.evaluate(state))
            return not value if self.negated else value


#####################################################################################################################################################
#####
#####  TEMPLATE AST
#####

class TemplateAST(BaseTree):

    NODES  = NODES

    # nodes that will be ignored during rewriting (pruned from the tree)
    _ignore_ = "ws space open close var_open var_close tag_else tag_end orphan keyword opt_text opt_quote dq_text sq_text"

    # nodes that will be replaced with a list of their children
    _reduce_ = "node statement else_branch target term operand string arg pipe_args opt_part opt_braces opt_dq_string opt_sq_string"

    def __init__(self, text, parser = None, filename = None):
        self.parser = parser or Grammar.get()
        super(TemplateAST, self).__init__(text, filename)

        if self.root is None:           # Parsimonious may return None instead of a tree root when text=""
            self.root = NODES.xdocument(self, _EmptyNode(), [])
        assert isinstance(self.root, NODES.xdocument)

    def render(self, state):
        return self.root.render(state)


class _EmptyNode:
    expr_name = 'document'
    start = end = 0


@lru_cache(maxsize = 256)
def _parse(text, delimiters, filename):
    return TemplateAST(text, Grammar.get(delimiters), filename)

def parse(text, filename = None):
    """
    Syntax tree of a template `text`. Trees are cached and can be rendered many times, in any number of Interpreters:
    they keep no state of rendering.
    """
    return _parse(text, Grammar.current_delimiters(), filename)
