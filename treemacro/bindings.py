"""
The binding environment: what each metavariable captured.

A metavariable outside any repetition binds a Fragment. Inside one repetition, it binds a
Sequence of Fragments, one per iteration; inside two, a Sequence of Sequences; and so on.
So the binding for a variable nested in two repetitions is addressed positionally by the
path (outer_index, inner_index).

Lookups are "prefix-compatible": a template may mention a variable at a deeper repetition
path than it was captured at (the captured value simply repeats), but not at a shallower
one: a variable which is still repeating cannot stand in for a single fragment.
"""

from typing import NamedTuple, Union, Iterable
from .interface import UnboundMetavariable, RepetitionCountMismatch

class Fragment(NamedTuple):
	trees: tuple

class Sequence(NamedTuple):
	items: tuple

Binding = Union[Fragment, Sequence]

def _descend(binding:Binding, path:tuple) -> Binding:
	for index in path:
		if isinstance(binding, Fragment): break
		binding = binding.items[index]
	return binding

class Environment:
	def __init__(self, bindings:dict):
		self.__bindings = dict(bindings)

	def __contains__(self, name): return name in self.__bindings
	def __getitem__(self, name) -> Binding: return self.__bindings[name]
	def names(self): return self.__bindings.keys()

	def lookup(self, name:str, path:tuple=(), span=None) -> tuple:
		""" Return the trees captured by `name` at the given repetition path. """
		try: binding = self.__bindings[name]
		except KeyError: raise UnboundMetavariable("$%s is not bound by the matched pattern"%name, span) from None
		binding = _descend(binding, path)
		if isinstance(binding, Sequence):
			raise UnboundMetavariable("$%s is still repeating at this depth"%name, span)
		return binding.trees

	def repetition_count(self, names:Iterable[str], path:tuple=(), span=None) -> int:
		"""
		How many times a repeated template fragment mentioning `names` replicates at `path`.
		Variables bound outside the repetition don't get a vote. Those that do must agree.
		"""
		counts = {}
		for name in names:
			if name in self.__bindings:
				binding = _descend(self.__bindings[name], path)
				if isinstance(binding, Sequence): counts[name] = len(binding.items)
		if not counts:
			raise UnboundMetavariable("repetition mentions no metavariable that repeats at this depth", span)
		if len(set(counts.values())) > 1:
			detail = ", ".join("$%s repeats %d times"%(k, v) for k,v in counts.items())
			raise RepetitionCountMismatch("inconsistent repetition: "+detail, span)
		return next(iter(counts.values()))
