"""
Hygiene contexts: the mechanism by which an identifier written into a macro's template
cannot be confused with an identically-spelled identifier supplied by the caller.

Every expansion gets one fresh context, a child of whatever context the invocation itself
appeared in. Identifiers the template introduces are tagged with the fresh context;
identifiers captured from the invocation keep the context they came in with. Downstream,
two identifiers mean the same thing only when both the text and the context agree.

The contexts form a tree rooted at ROOT ("no macro"). Numbering is strictly by order of
allocation, so a single-threaded expansion run always numbers contexts the same way.
The allocator's counter is the only piece of shared mutable state in the engine, so
that's where the lock lives.
"""

import threading
from typing import NamedTuple, Optional, Iterator
from .interface import ROOT_CONTEXT, Token
from .support.foundation import allocate, chain

class HygieneContext(NamedTuple):
	ident: int
	parent: Optional[int]

ROOT = HygieneContext(ROOT_CONTEXT, None)

class HygieneAllocator:
	""" Hands out contexts. One of these lives exactly as long as one expansion run. """
	def __init__(self):
		self.__contexts = [ROOT]
		self.__lock = threading.Lock()

	def allocate_child(self, parent) -> HygieneContext:
		""" Accepts either a HygieneContext or its integer identity. Never reuses an identity. """
		parent_id = parent.ident if isinstance(parent, HygieneContext) else parent
		with self.__lock:
			if not 0 <= parent_id < len(self.__contexts): raise KeyError(parent_id)
			ident = len(self.__contexts)
			context = HygieneContext(ident, parent_id)
			allocate(self.__contexts, context)
		return context

	def resolve(self, ident:int) -> int:
		"""
		The context to parent an expansion on, given the context of the invocation's name token.
		Tokens may come from an earlier run's output, tagged with contexts this allocator never
		handed out. Those count as ROOT.
		"""
		with self.__lock:
			return ident if 0 <= ident < len(self.__contexts) else ROOT_CONTEXT

	def __getitem__(self, ident:int) -> HygieneContext:
		return self.__contexts[ident]

	def __len__(self): return len(self.__contexts)

	def ancestry(self, context) -> Iterator[HygieneContext]:
		""" Yield the given context and each of its ancestors, ending with ROOT. """
		start = self[context] if isinstance(context, int) else context
		return chain(start, lambda c: None if c.parent is None else self[c.parent])

	def depth(self, context) -> int:
		""" How many expansions deep a context sits. ROOT is at zero. """
		return sum(1 for _ in self.ancestry(context)) - 1

def same_binding(a:Token, b:Token) -> bool:
	""" Module-level spelling of Token.same_binding, for use as a key function and the like. """
	return a.same_binding(b)
