"""
A small reader, so the engine can be driven from plain text.

Real callers bring their own lexer; the engine only needs tokens. But demonstrations,
tests, and the command-line tool want something quick, so here is a regex-driven tokenizer
for a vaguely C-like surface, along with a routine that picks `macro_rules!` definitions
out of a token forest:

	macro_rules! name {
		( pattern ) => { template } ;
		( pattern ) => { template }
	}

The template's own braces are not part of the template. The pattern's parentheses are
kept, though the matcher ignores which kind of delimiter surrounds a pattern.
"""

import re
from .interface import Token, Span, MacroError, IDENT, LITERAL, PUNCT, OPEN, CLOSE, RegistrationError
from .trees import Leaf, Group
from .table import DefinitionTable

class LexicalError(MacroError):
	""" The tokenizer found something it could not make sense of, at the given offset. """
	def __init__(self, position:int, text:str):
		super().__init__(position, text)
		self.position, self.text = position, text
	def __str__(self): return "cannot tokenize %r at %d"%(self.text, self.position)

_LEXEME = re.compile(r"""
	(?P<ignore> \s+ | //[^\n]* )
	| (?P<ident> [A-Za-z_]\w* )
	| (?P<number> \d+(?:\.\d+)? )
	| (?P<string> "(?:[^"\\\n]|\\.)*" | '(?:[^'\\\n]|\\.)*' )
	| (?P<open> [(\[{] )
	| (?P<close> [)\]}] )
	| (?P<punct> => | -> | :: | == | != | <= | >= | && | \|\| | [^\w\s"'] )
""", re.VERBOSE)

_KIND = {'ident': IDENT, 'number': LITERAL, 'string': LITERAL, 'open': OPEN, 'close': CLOSE, 'punct': PUNCT}

def tokenize(text:str) -> list[Token]:
	tokens = []
	position = 0
	while position < len(text):
		match = _LEXEME.match(text, position)
		if match is None: raise LexicalError(position, text[position:position+10])
		if match.lastgroup != 'ignore':
			tokens.append(Token(_KIND[match.lastgroup], match.group(), Span(*match.span())))
		position = match.end()
	return tokens


def _is(tree, kind, text=None) -> bool:
	return isinstance(tree, Leaf) and tree.token.kind == kind and (text is None or tree.token.text == text)

def _read_rules(name:str, body:Group) -> list:
	""" Split the body of a macro_rules! item into (pattern, template) pairs. """
	rules = []
	items = body.items
	i = 0
	while i < len(items):
		if not (
			i+2 < len(items)
			and isinstance(items[i], Group)
			and _is(items[i+1], PUNCT, '=>')
			and isinstance(items[i+2], Group)
		):
			raise RegistrationError(name, "expected a rule of the form (pattern) => {template}", items[i].span)
		rules.append((items[i], items[i+2].items))
		i += 3
		if i < len(items):
			if not _is(items[i], PUNCT, ';'):
				raise RegistrationError(name, "rules must be separated by ';'", items[i].span)
			i += 1
	return rules

def collect_definitions(forest:tuple, table:DefinitionTable) -> tuple:
	"""
	Register every top-level macro_rules! item into the table, and return the rest of the forest.
	Definitions are only recognized at top level; that's all the demonstration needs.
	"""
	remaining = []
	i = 0
	while i < len(forest):
		if (
			i+3 < len(forest)
			and _is(forest[i], IDENT, 'macro_rules')
			and _is(forest[i+1], PUNCT, '!')
			and _is(forest[i+2], IDENT)
			and isinstance(forest[i+3], Group)
		):
			name = forest[i+2].token.text
			table.register(name, _read_rules(name, forest[i+3]))
			i += 4
			if i < len(forest) and _is(forest[i], PUNCT, ';'): i += 1
		else:
			remaining.append(forest[i])
			i += 1
	return tuple(remaining)
