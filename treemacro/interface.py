"""
This file aggregates the token vocabulary and the exception types which treemacro deals in.

The engine does not care where tokens come from. Some external lexer produces them;
all the engine asks is the kind, the text, and where in the source they came from.
Two more fields ride along on every token once expansion gets involved:

context: the hygiene context in which the token was introduced. Zero means "no macro";
	it's the context of everything the lexer hands us.
site: the span of the nearest enclosing macro invocation, or None for tokens which
	never passed through an expansion. This is how diagnostics trace output back to
	wherever the trouble started.
"""

from typing import NamedTuple, Optional

IDENT = 'ident'
LITERAL = 'literal'
PUNCT = 'punct'
OPEN = 'open'
CLOSE = 'close'

DELIMITERS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = {v:k for k,v in DELIMITERS.items()}

ROOT_CONTEXT = 0 # Identity of the "no macro" hygiene context.

class Span(NamedTuple):
	""" Character offsets, left-inclusive and right-exclusive, as a scanner would report. """
	left: int
	right: int

	def slice(self): return slice(self.left, self.right)
	def width(self): return self.right - self.left
	def cover(self, other:"Span") -> "Span":
		return Span(min(self.left, other.left), max(self.right, other.right))

class Token(NamedTuple):
	kind: str
	text: str
	span: Span
	context: int = ROOT_CONTEXT
	site: Optional[Span] = None

	def same_text(self, other:"Token") -> bool:
		""" Pattern literals compare on kind and text; nothing else. """
		return self.kind == other.kind and self.text == other.text

	def same_binding(self, other:"Token") -> bool:
		"""
		Downstream, two identifiers refer to the same thing only if text AND hygiene context agree.
		This is the whole point of hygiene, so it gets a name.
		"""
		return self.kind == other.kind == IDENT and self.text == other.text and self.context == other.context

	def __str__(self): return self.text

def make_token(kind:str, text:str, left:int=0) -> Token:
	""" Handy for tests and synthetic tokens: a token spanning its own text starting at `left`. """
	return Token(kind, text, Span(left, left+len(text)))


class MacroError(ValueError):
	""" Base class of all exceptions arising from the macro machinery. """

class UnbalancedDelimiter(MacroError):
	"""
	Raised when delimiters fail to pair up properly. Parameters are:
		the span of the offending token;
		a plain-language description.
	"""
	def __init__(self, span:Span, message:str):
		super().__init__(span, message)
		self.span, self.message = span, message
	def __str__(self): return "%s at %d"%(self.message, self.span.left)

class RegistrationError(MacroError):
	""" Something about a macro definition makes it unfit to register. The macro is not registered. """
	def __init__(self, name:str, message:str, span:Optional[Span]=None):
		super().__init__(name, message, span)
		self.name, self.message, self.span = name, message, span
	def __str__(self): return "macro %r: %s"%(self.name, self.message)

class DuplicateMacroName(RegistrationError):
	pass

class AmbiguousPattern(RegistrationError):
	pass

class NoMatch(MacroError):
	"""
	One rule's pattern did not fit the input. This is not fatal: the matcher just tries the next rule.
	The reason and (where known) the span of the input that disagreed are kept for diagnostics.
	"""
	def __init__(self, reason:str, span:Optional[Span]=None):
		super().__init__(reason, span)
		self.reason, self.span = reason, span
	def __str__(self): return self.reason


class MacroInvocation(NamedTuple):
	name: str
	argument: object # A trees.Group; typed loosely to keep this module free of imports.
	context: int
	span: Span

class ExpansionError(MacroError):
	"""
	Base class for failures while expanding one invocation.
	The driver fills in `invocation` and `backtrace` (spans of enclosing invocations, innermost first)
	on the way out, so the component raising the error need not know where it is being called from.
	"""
	def __init__(self, message:str, span:Optional[Span]=None):
		super().__init__(message)
		self.message = message
		self.span = span
		self.invocation: Optional[MacroInvocation] = None
		self.backtrace: list[Span] = []
		self.phase = None # The driver notes which phase the innermost invocation was in.

	def locate(self, invocation:MacroInvocation):
		""" Called by the driver as the error propagates out through each invocation. """
		if self.invocation is None:
			self.invocation = invocation
			if self.span is None: self.span = invocation.span
		else:
			self.backtrace.append(invocation.span)
		return self

	def __str__(self):
		if self.invocation is None: return self.message
		return "in %s!: %s"%(self.invocation.name, self.message)

	def as_issue(self):
		""" Package this error for display via failureprone.Issue. """
		from .support.failureprone import Issue, Severity, Evidence
		evidence = []
		if self.span is not None: evidence.append(Evidence(self.span.slice()))
		if self.invocation is not None and self.invocation.span != self.span:
			evidence.append(Evidence(self.invocation.span.slice(), "in this invocation"))
		evidence.extend(Evidence(s.slice(), "expanded from here") for s in self.backtrace)
		return Issue("expanding macros", Severity.ERROR, str(self), {None: evidence})

class NoMatchingRule(ExpansionError):
	""" Every rule was tried; none fit. `reasons` has one NoMatch per rule, in declaration order. """
	def __init__(self, name:str, reasons:list, span:Optional[Span]=None):
		super().__init__("no rule of macro %r matches this invocation"%name, span)
		self.reasons = reasons
	def __str__(self):
		lines = [super().__str__()]
		lines.extend("\trule %d: %s"%(i, r) for i, r in enumerate(self.reasons))
		return "\n".join(lines)

class UnboundMetavariable(ExpansionError):
	pass

class RepetitionCountMismatch(ExpansionError):
	pass

class ExpansionDepthExceeded(ExpansionError):
	def __init__(self, depth:int, span:Optional[Span]=None):
		super().__init__("recursion limit reached: expansion depth %d exceeds the configured maximum"%depth, span)
		self.depth = depth

class TokenBudgetExceeded(ExpansionError):
	pass

class RepetitionLimitExceeded(TokenBudgetExceeded):
	""" A single repetition slot matched more times than the configured ceiling allows. """
