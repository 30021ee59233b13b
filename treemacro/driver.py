"""
The expansion driver: find invocations, match, bind, transcribe, rescan, repeat.

Each invocation goes through the same phases:

	IDLE -> MATCHING -> BOUND -> EXPANDED -> RESCANNING -> DONE
	                                     (or FAILED from anywhere)

Rescanning looks for further invocations in the freshly-transcribed output and expands each
at one more level of depth. An invocation deeper than the configured maximum fails. So does
one that makes the run produce more tokens than the configured budget.

Nested expansion does not recurse on the Python stack. Each invocation under way is a
generator that yields the nested invocations it finds and is sent back their expansions;
the generators wait on an explicit stack. So the depth ceiling is whatever the
configuration says, not whatever the interpreter can stand.

Failure is all-or-nothing per top-level invocation. If anything nested inside it fails, the
whole thing fails and contributes no tokens. What happens next is a policy question, so it's
delegated to an ExpansionErrorListener. The default listener re-raises, which ends the run.
A CollectingListener instead keeps the error and lets the driver carry on with the siblings.
"""

import sys, warnings
from enum import Enum
from typing import NamedTuple, Optional, Iterable

from .interface import Token, PUNCT, IDENT, MacroInvocation, ExpansionError, ExpansionDepthExceeded, TokenBudgetExceeded
from .trees import Leaf, Group, as_forest, flatten
from .table import DefinitionTable
from .matching import Matcher, match_definition
from .transcribe import Transcriber
from .hygiene import HygieneAllocator

VERBOSE = False # Squawk about every expansion on stderr.

class ExpansionConfig(NamedTuple):
	max_expansion_depth: int = 64
	max_total_output_tokens: int = 1_000_000
	max_repetition_count: int = 10_000
	marker: Optional[str] = '!' # Punctuation between a macro's name and its argument group; None for none.

	def validate(self) -> "ExpansionConfig":
		for field, least in (('max_expansion_depth', 0), ('max_total_output_tokens', 1), ('max_repetition_count', 1)):
			value = getattr(self, field)
			if not isinstance(value, int) or isinstance(value, bool) or value < least:
				raise ValueError("%s must be an integer no less than %d, not %r"%(field, least, value))
		if self.marker is not None and not (isinstance(self.marker, str) and self.marker):
			raise ValueError("marker must be a non-empty string or None")
		return self

class Phase(Enum):
	IDLE = "idle"
	MATCHING = "matching"
	BOUND = "bound"
	EXPANDED = "expanded"
	RESCANNING = "rescanning"
	DONE = "done"
	FAILED = "failed"

class ExpansionErrorListener:
	"""
	Implement this interface to report/respond to failed invocations.
	It hears only about top-level invocations; failures nested within are folded into those.
	"""
	def expansion_failed(self, error:ExpansionError):
		"""
		The invocation described by `error.invocation` produced no output.
		If this returns normally, the driver drops the invocation and carries on.
		Default behavior is to raise the error, ending the run.
		"""
		raise error

class CollectingListener(ExpansionErrorListener):
	""" Keep every failure; optionally also issue a warning for each. """
	def __init__(self, warn:bool=False):
		self.errors: list[ExpansionError] = []
		self.warn = warn

	def expansion_failed(self, error:ExpansionError):
		self.errors.append(error)
		if self.warn: warnings.warn(str(error))

class Expander:
	"""
	Owns one definition table (which it seals) and one configuration.
	Each call to `expand` is an independent run with a fresh hygiene allocator and token budget,
	so identical inputs always give identical outputs.
	"""
	def __init__(self, table:DefinitionTable, config:ExpansionConfig=None, on_error:ExpansionErrorListener=None):
		self.config = (config or ExpansionConfig()).validate()
		table.seal()
		self.table = table
		self.on_error = on_error or ExpansionErrorListener()
		self.matcher = Matcher(self.config.max_repetition_count)
		self.allocator = HygieneAllocator()
		self.__emitted = 0

	def expand(self, token_stream:Iterable[Token]) -> list[Token]:
		""" Flat tokens in, flat tokens out. Raises UnbalancedDelimiter before expanding anything. """
		return flatten(self.expand_forest(as_forest(token_stream)))

	def expand_forest(self, forest:tuple) -> tuple:
		self.allocator = HygieneAllocator()
		self.__emitted = 0
		return self.__run(self.__scan(forest, 0))

	def expand_invocation(self, invocation:MacroInvocation, depth:int) -> tuple:
		"""
		Take one invocation all the way through to DONE, including everything nested within.
		Raises the located ExpansionError if anything fails; no listener is consulted.
		"""
		return self.__run(self.__expand(invocation, depth))

	def charge(self, nr_tokens:int):
		self.__emitted += nr_tokens
		if self.__emitted > self.config.max_total_output_tokens:
			raise TokenBudgetExceeded("expansion produced more than %d tokens"%self.config.max_total_output_tokens)

	def recognize(self, trees:tuple, i:int) -> tuple[Optional[MacroInvocation], int]:
		""" If an invocation starts at trees[i], return it and the number of trees it occupies. """
		head = trees[i]
		if not (isinstance(head, Leaf) and head.token.kind == IDENT and head.token.text in self.table):
			return None, 1
		j = i+1
		marker = self.config.marker
		if marker is not None:
			if not (j < len(trees) and isinstance(trees[j], Leaf) and trees[j].token.kind == PUNCT and trees[j].token.text == marker):
				return None, 1
			j += 1
		if not (j < len(trees) and isinstance(trees[j], Group)):
			return None, 1
		argument = trees[j]
		name = head.token
		return MacroInvocation(name.text, argument, name.context, name.span.cover(argument.span)), j+1-i

	def __run(self, root) -> tuple:
		"""
		Drive a generator from __scan or __expand to completion.
		Whenever one yields an (invocation, depth) request, that invocation's own generator goes on
		the stack; its result, or its ExpansionError, goes back to whichever generator asked.
		"""
		stack = [root]
		result, error = None, None
		while True:
			try:
				if error is None: request = stack[-1].send(result)
				else: request = stack[-1].throw(error)
			except StopIteration as done:
				stack.pop()
				result, error = done.value, None
				if not stack: return result
			except ExpansionError as e:
				stack.pop()
				if not stack: raise
				result, error = None, e
			else:
				stack.append(self.__expand(*request))
				result, error = None, None

	def __scan(self, trees:tuple, depth:int):
		out = []
		i = 0
		while i < len(trees):
			invocation, width = self.recognize(trees, i)
			if invocation is None:
				tree = trees[i]
				if isinstance(tree, Group): tree = Group(tree.open, (yield from self.__scan(tree.items, depth)), tree.close)
				out.append(tree)
			elif depth:
				out.extend((yield invocation, depth))
			else:
				emitted = self.__emitted
				try: out.extend((yield invocation, depth))
				except ExpansionError as e:
					self.__emitted = emitted # A dropped invocation produced nothing.
					self.on_error.expansion_failed(e)
			i += width
		return tuple(out)

	def __expand(self, invocation:MacroInvocation, depth:int):
		phase = Phase.IDLE
		try:
			if depth > self.config.max_expansion_depth:
				raise ExpansionDepthExceeded(depth, invocation.span)
			phase = Phase.MATCHING
			definition = self.table.lookup(invocation.name)
			rule_index, rule, environment = match_definition(definition, invocation.argument, self.matcher)
			phase = Phase.BOUND
			context = self.allocator.allocate_child(self.allocator.resolve(invocation.context))
			output = Transcriber(environment, context.ident, invocation.span, self.charge).transcribe(rule.template)
			phase = Phase.EXPANDED
			if VERBOSE:
				print("%s! at %d: rule %d, context %d, depth %d"%(invocation.name, invocation.span.left, rule_index, context.ident, depth), file=sys.stderr)
			phase = Phase.RESCANNING
			return (yield from self.__scan(output, depth+1))
		except ExpansionError as e:
			if e.invocation is None: e.phase = phase
			raise e.locate(invocation)

def expand(token_stream:Iterable[Token], definition_table:DefinitionTable, config:ExpansionConfig=None, *, on_error:ExpansionErrorListener=None) -> list[Token]:
	""" The whole programmatic surface in one call. """
	return Expander(definition_table, config, on_error).expand(token_stream)
