"""
Rewriting of raw syntax trees produced by Parsimonious into trees of custom node classes.
"""

from parsimonious.exceptions import ParseError, IncompleteParseError

from hyperpage.errors import TemplateSyntaxError


#####################################################################################################################################################
#####
#####  BASE TREE
#####

class BaseTree:
    """
    Syntax tree of a document, built in two steps: parsing of the text with `parser` (a Parsimonious grammar),
    and rewriting of the resulting raw tree. During rewriting, every named node of the raw tree is replaced
    with an instance of the class x<rule> found in the `NODES` container, unless the rule is listed in `_ignore_`
    (node removed together with its subtree) or `_reduce_` (node replaced with the list of its rewritten children).
    Anonymous nodes, generated by unnamed groupings (...) and literals, are reduced if `_reduce_anonym_` is true.
    """

    NODES  = None               # container class of node classes: x<rule> for every rule that is kept in the tree
    parser = None               # Parsimonious grammar

    _ignore_ = ""               # space-separated names of rules whose nodes are pruned from the tree
    _reduce_ = ""               # space-separated names of rules whose nodes are replaced with their children
    _reduce_anonym_ = True

    text     = None             # input text
    filename = None             # name of the file where `text` comes from; for error messages
    ast      = None             # raw tree returned by Parsimonious
    root     = None             # root node of the tree after rewriting


    class node:
        """Base class of tree nodes."""

        tree     = None         # BaseTree that contains this node
        type     = None         # name of the grammar rule that produced this node
        pos      = None         # (start, end) position of the node's text in tree.text
        children = None         # list of child nodes, after rewriting

        def __init__(self, tree, pnode, children):
            self.tree = tree
            self.type = pnode.expr_name
            self.pos  = (pnode.start, pnode.end)
            self.children = children
            self.setup()

        def setup(self):
            """Initialize node-specific attributes once `children` are set. Override in subclasses."""

        @property
        def fulltext(self):
            return self.tree.text

        def text(self):
            """The part of the input text that was matched by this node."""
            return self.tree.text[self.pos[0]:self.pos[1]]

        def __str__(self): return "<%s>" % self.__class__.__name__


    def __init__(self, text, filename = None):
        self.text = text
        self.filename = filename
        self._ignore = set(self._ignore_.split())
        self._reduce = set(self._reduce_.split())

        try:
            self.ast = self.parser.parse(text)
        except IncompleteParseError as ex:
            raise TemplateSyntaxError("unexpected text", text, ex.pos, filename) from ex
        except ParseError as ex:
            raise TemplateSyntaxError(f"syntax error in rule '{ex.expr.name or ex.expr}'", text, ex.pos, filename) from ex

        if self.ast is not None:
            nodes = self._rewrite(self.ast)
            assert len(nodes) == 1
            self.root = nodes[0]

    def _rewrite(self, pnode):
        """Rewrite a raw node `pnode` to a list of 0+ custom nodes."""
        name = pnode.expr_name
        if name in self._ignore:
            return []

        children = [node for child in pnode.children for node in self._rewrite(child)]

        if name in self._reduce or (not name and self._reduce_anonym_):
            return children

        cls = getattr(self.NODES, 'x' + name, None)
        if cls is None: raise Exception(f"no node class defined for the grammar rule '{name}'")
        return [cls(self, pnode, children)]
