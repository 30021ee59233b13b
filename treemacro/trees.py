"""
Token trees: the structural view of a token stream.

A tree is either a Leaf holding one token, or a Group holding its opening and closing
delimiter tokens with an ordered tuple of trees between. Delimiters must balance;
`build_forest` checks that before anyone gets to match against anything.

Everything here is an immutable tuple. The template expander splices the same captured
subtree into its output as many times as the template mentions it, sharing rather than copying.
"""

from typing import NamedTuple, Iterable, Union
from .interface import Token, UnbalancedDelimiter, OPEN, CLOSE, DELIMITERS, CLOSERS, IDENT, LITERAL

class Leaf(NamedTuple):
	token: Token

	@property
	def span(self): return self.token.span

class Group(NamedTuple):
	open: Token
	items: tuple
	close: Token

	@property
	def delimiter(self) -> str: return self.open.text

	@property
	def span(self): return self.open.span.cover(self.close.span)

TokenTree = Union[Leaf, Group]

def build_forest(tokens:Iterable[Token]) -> tuple:
	"""
	Parse a flat token sequence into a tuple of token trees, validating delimiter balance.
	Raises UnbalancedDelimiter citing the offending token's span for a stray closer,
	a closer of the wrong shape, or an opener that never gets closed.
	"""
	stack = [] # Pairs of (opening token, list of trees so far)
	current = []
	for token in tokens:
		if token.kind == OPEN:
			if token.text not in DELIMITERS: raise UnbalancedDelimiter(token.span, "unknown opening delimiter %r"%token.text)
			stack.append((token, current))
			current = []
		elif token.kind == CLOSE:
			if token.text not in CLOSERS: raise UnbalancedDelimiter(token.span, "unknown closing delimiter %r"%token.text)
			if not stack: raise UnbalancedDelimiter(token.span, "unexpected closing delimiter %r"%token.text)
			opener, outer = stack.pop()
			if DELIMITERS[opener.text] != token.text:
				raise UnbalancedDelimiter(token.span, "mismatched closing delimiter %r for %r at %d"%(token.text, opener.text, opener.span.left))
			outer.append(Group(opener, tuple(current), token))
			current = outer
		else:
			current.append(Leaf(token))
	if stack:
		opener = stack[-1][0]
		raise UnbalancedDelimiter(opener.span, "unclosed delimiter %r"%opener.text)
	return tuple(current)

def as_forest(thing) -> tuple:
	"""
	Callers may hand over a single tree, a sequence of trees, or a flat sequence of tokens.
	This normalizes all of those into a tuple of trees.
	"""
	if isinstance(thing, (Leaf, Group)): return (thing,)
	if isinstance(thing, Token): return (Leaf(thing),)
	items = tuple(thing)
	if all(isinstance(x, (Leaf, Group)) for x in items): return items
	return build_forest(items)

def flatten(trees:Iterable[TokenTree]) -> list[Token]:
	""" Inverse of build_forest. """
	result = []
	def visit(tree):
		if isinstance(tree, Leaf): result.append(tree.token)
		else:
			result.append(tree.open)
			for t in tree.items: visit(t)
			result.append(tree.close)
	for tree in trees: visit(tree)
	return result

def equivalent(a:TokenTree, b:TokenTree) -> bool:
	""" Structural comparison on kind and text only: spans and hygiene contexts do not participate. """
	if isinstance(a, Leaf):
		return isinstance(b, Leaf) and a.token.same_text(b.token)
	return (
		isinstance(b, Group)
		and a.delimiter == b.delimiter
		and len(a.items) == len(b.items)
		and all(map(equivalent, a.items, b.items))
	)

def is_ident(tree:TokenTree) -> bool: return isinstance(tree, Leaf) and tree.token.kind == IDENT
def is_literal(tree:TokenTree) -> bool: return isinstance(tree, Leaf) and tree.token.kind == LITERAL

def count_tokens(trees:Iterable[TokenTree]) -> int:
	return sum(1 if isinstance(t, Leaf) else 2+count_tokens(t.items) for t in trees)

def forest_span(trees:tuple):
	""" The span covering a non-empty tuple of trees. """
	return trees[0].span.cover(trees[-1].span)

_TIGHT_AFTER = {'(', '[', '!', '$', '.', '#'}
_TIGHT_BEFORE = {')', ']', ',', ';', '.', '!', ':'}

def render(tokens:Iterable[Token], *, show_context=False) -> str:
	"""
	Make display text from a token sequence, for diagnostics and the command line.
	This is not meant to reproduce the original spacing, only to be easy to read.
	With show_context, identifiers from inside an expansion get a #n suffix naming their hygiene context.
	"""
	parts = []
	prior = None
	for token in tokens:
		text = token.text
		if show_context and token.kind == IDENT and token.context: text = "%s#%d"%(text, token.context)
		if prior is not None and prior not in _TIGHT_AFTER and token.text not in _TIGHT_BEFORE:
			parts.append(' ')
		parts.append(text)
		prior = token.text
	return ''.join(parts)
