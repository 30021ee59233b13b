"""
Rules, and the compilation of patterns and templates from token trees into rule elements.

A rule is written in tokens, the same as anything else:

	pattern:   $name:class      metavariable; class is one of ident, literal, tt, any
	           $( ... ) sep? op repetition; op is one of * + ?; sep is any single non-group token
	template:  $name            reference to a metavariable
	           $( ... ) sep? op repetition, replicated once per captured index
	           anything else is literal, in both patterns and templates.

Compiled elements form a closed set of four variants. Matcher and transcriber dispatch on them
by name; see the Visitor class in support/foundation.py.

Registration is where we catch patterns that could match the same input more than one way.
The "any" class is the troublemaker: it captures a run of trees, stopping at the next token
the pattern fixes. If nothing fixed comes next, there is no stopping rule, and that's an error
right here rather than a surprise later. The fixed tokens at which each "any" stops get worked
out once, at registration, and stored in the element as its `anchors`.
"""

from typing import NamedTuple, Optional
from .interface import Token, PUNCT, IDENT, RegistrationError, AmbiguousPattern
from .trees import Leaf, Group, as_forest

FRAGMENT_CLASSES = ('ident', 'literal', 'tt', 'any') # From most to least restrictive.
ZERO_OR_MORE, ONE_OR_MORE, ZERO_OR_ONE = '*', '+', '?'
REPETITION_OPS = (ZERO_OR_MORE, ONE_OR_MORE, ZERO_OR_ONE)
SIGIL = '$'

class Literal(NamedTuple):
	token: Token

class Delimited(NamedTuple):
	open: Token
	elements: tuple
	close: Token

class MetaVar(NamedTuple):
	name: str
	fragment: Optional[str] # None in templates
	token: Token # the sigil, for diagnostics
	anchors: Optional[tuple] = () # Only meaningful for the "any" class; see module docstring.

class Repetition(NamedTuple):
	elements: tuple
	separator: Optional[Token]
	op: str
	names: tuple # Metavariables declared (in patterns) or mentioned (in templates) within, at any depth.
	token: Token

class Rule(NamedTuple):
	pattern: tuple
	template: tuple

class MacroDefinition(NamedTuple):
	name: str
	rules: tuple


def _is_punct(tree, text=None) -> bool:
	return isinstance(tree, Leaf) and tree.token.kind == PUNCT and (text is None or tree.token.text == text)

def _names_within(elements) -> tuple:
	found = []
	for e in elements:
		if isinstance(e, MetaVar): found.append(e.name)
		elif isinstance(e, Delimited): found.extend(_names_within(e.elements))
		elif isinstance(e, Repetition): found.extend(e.names)
	return tuple(dict.fromkeys(found))


class _Reader:
	""" Shared machinery for reading patterns and templates; they differ only in the metavariable form. """
	def __init__(self, macro_name:str, in_pattern:bool):
		self.macro_name = macro_name
		self.in_pattern = in_pattern

	def gripe(self, message, token:Token=None):
		raise RegistrationError(self.macro_name, message, None if token is None else token.span)

	def read(self, trees:tuple) -> tuple:
		elements = []
		i = 0
		while i < len(trees):
			tree = trees[i]
			if isinstance(tree, Group):
				elements.append(Delimited(tree.open, self.read(tree.items), tree.close))
				i += 1
			elif _is_punct(tree, SIGIL) and i+1 < len(trees):
				nxt = trees[i+1]
				if isinstance(nxt, Leaf) and nxt.token.kind == IDENT:
					i = self.read_metavar(trees, i, elements)
				elif isinstance(nxt, Group) and nxt.delimiter == '(':
					i = self.read_repetition(trees, i, elements)
				else:
					elements.append(Literal(tree.token))
					i += 1
			else:
				elements.append(Literal(tree.token))
				i += 1
		return tuple(elements)

	def read_metavar(self, trees, i, elements) -> int:
		sigil, name = trees[i].token, trees[i+1].token.text
		if not self.in_pattern:
			elements.append(MetaVar(name, None, sigil))
			return i+2
		if not (i+3 < len(trees) and _is_punct(trees[i+2], ':') and isinstance(trees[i+3], Leaf)):
			self.gripe("metavariable $%s lacks a fragment class"%name, sigil)
		fragment = trees[i+3].token.text
		if fragment not in FRAGMENT_CLASSES:
			self.gripe("unknown fragment class %r for $%s; the choices are %s"%(fragment, name, ", ".join(FRAGMENT_CLASSES)), trees[i+3].token)
		elements.append(MetaVar(name, fragment, sigil))
		return i+4

	def read_repetition(self, trees, i, elements) -> int:
		sigil, body = trees[i].token, trees[i+1]
		j = i+2
		if j < len(trees) and _is_punct(trees[j]) and trees[j].token.text in REPETITION_OPS:
			separator, op = None, trees[j].token.text
			j += 1
		elif j+1 < len(trees) and isinstance(trees[j], Leaf) and _is_punct(trees[j+1]) and trees[j+1].token.text in REPETITION_OPS:
			separator, op = trees[j].token, trees[j+1].token.text
			j += 2
		else:
			self.gripe("repetition lacks an operator; expected one of %s"%" ".join(REPETITION_OPS), sigil)
		inner = self.read(body.items)
		if not inner: self.gripe("repetition has an empty body", sigil)
		elements.append(Repetition(inner, separator, op, _names_within(inner), sigil))
		return j


def _check_distinct(macro_name, elements):
	seen = set()
	def visit(elts):
		for e in elts:
			if isinstance(e, MetaVar):
				if e.name in seen: raise AmbiguousPattern(macro_name, "metavariable $%s is bound more than once"%e.name, e.token.span)
				seen.add(e.name)
			elif isinstance(e, Delimited): visit(e.elements)
			elif isinstance(e, Repetition): visit(e.elements)
	visit(elements)

def _is_fixed(element) -> bool:
	return isinstance(element, (Literal, Delimited))

def _follow(rest:tuple, follow):
	"""
	The anchors at which a greedy capture must stop, given what comes after it.
	An empty tuple means "the end of the enclosing group"; None means nothing fixed follows.
	"""
	if not rest: return follow
	if _is_fixed(rest[0]): return (rest[0],)
	return None

def _anchor(macro_name, elements:tuple, follow) -> tuple:
	result = []
	for i, e in enumerate(elements):
		rest = elements[i+1:]
		if isinstance(e, MetaVar) and e.fragment == 'any':
			anchors = _follow(rest, follow)
			if anchors is None:
				if rest: what = "$%s"%rest[0].name if isinstance(rest[0], MetaVar) else "a repetition"
				else: what = "nothing fixed"
				raise AmbiguousPattern(macro_name, "$%s:any is followed by %s, so where it stops is ambiguous"%(e.name, what), e.token.span)
			result.append(e._replace(anchors=anchors))
		elif isinstance(e, Delimited):
			result.append(e._replace(elements=_anchor(macro_name, e.elements, ())))
		elif isinstance(e, Repetition):
			after = _follow(rest, follow)
			if after is None: body_follow = None
			elif e.separator is not None: body_follow = (Literal(e.separator),) + after
			elif e.op == ZERO_OR_ONE: body_follow = after
			elif _is_fixed(e.elements[0]): body_follow = (e.elements[0],) + after
			else: body_follow = None
			result.append(e._replace(elements=_anchor(macro_name, e.elements, body_follow)))
		else:
			result.append(e)
	return tuple(result)

def compile_pattern(macro_name:str, pattern) -> tuple:
	"""
	Pattern may be given as a Group (whose own delimiters are not compared against the invocation),
	as a sequence of trees, or as flat tokens. Returns a tuple of elements.
	"""
	forest = as_forest(pattern)
	if len(forest) == 1 and isinstance(forest[0], Group): forest = forest[0].items
	elements = _Reader(macro_name, True).read(forest)
	_check_distinct(macro_name, elements)
	return _anchor(macro_name, elements, ())

def compile_template(macro_name:str, template) -> tuple:
	""" Every tree of the template is emitted, delimiters and all. """
	return _Reader(macro_name, False).read(as_forest(template))

def compile_rule(macro_name:str, pattern, template) -> Rule:
	return Rule(compile_pattern(macro_name, pattern), compile_template(macro_name, template))

def compile_definition(name:str, rules) -> MacroDefinition:
	rules = tuple(compile_rule(name, p, t) for p,t in rules)
	if not rules: raise RegistrationError(name, "a macro needs at least one rule")
	return MacroDefinition(name, rules)
