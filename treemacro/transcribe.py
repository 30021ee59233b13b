"""
The template expander: instantiate a matched rule's template against its bindings.

* Literal template tokens are copied, tagged with the expansion's fresh hygiene context.
* Metavariable references splice in exactly the captured trees. Captured tokens keep the
  hygiene context they arrived with; substitution never re-tags what the caller wrote.
* Repetitions replicate once per captured index, with the separator between instances.

Every token emitted is charged against a budget supplied by the driver, so that a pathological
repetition blows up early rather than after eating all the memory in the machine.
"""

from typing import Callable
from .interface import Token, Span
from .trees import Leaf, Group, count_tokens
from .rules import Literal, Delimited, MetaVar, Repetition
from .bindings import Environment
from .support.foundation import Visitor

def _no_budget(n:int): pass

class Transcriber(Visitor):
	def __init__(self, environment:Environment, context:int, site:Span, charge:Callable[[int], None]=_no_budget):
		self.environment = environment
		self.context = context
		self.site = site
		self.charge = charge

	def transcribe(self, elements:tuple, path:tuple=()) -> tuple:
		out = []
		for element in elements: self.visit(element, path, out)
		return tuple(out)

	def introduce(self, token:Token) -> Token:
		""" A token written in the template itself. """
		return token._replace(context=self.context, site=self.site)

	def carry(self, tree):
		""" A captured tree passes through untouched, except to note where it was first carried. """
		if isinstance(tree, Leaf): return Leaf(self.relay(tree.token))
		return Group(self.relay(tree.open), tuple(map(self.carry, tree.items)), self.relay(tree.close))

	def relay(self, token:Token) -> Token:
		return token if token.site is not None else token._replace(site=self.site)

	def visit_Literal(self, element:Literal, path, out):
		self.charge(1)
		out.append(Leaf(self.introduce(element.token)))

	def visit_Delimited(self, element:Delimited, path, out):
		self.charge(2)
		out.append(Group(self.introduce(element.open), self.transcribe(element.elements, path), self.introduce(element.close)))

	def visit_MetaVar(self, element:MetaVar, path, out):
		trees = self.environment.lookup(element.name, path, element.token.span)
		self.charge(count_tokens(trees))
		out.extend(map(self.carry, trees))

	def visit_Repetition(self, element:Repetition, path, out):
		count = self.environment.repetition_count(element.names, path, element.token.span)
		for index in range(count):
			if index and element.separator is not None:
				self.charge(1)
				out.append(Leaf(self.introduce(element.separator)))
			for inner in element.elements: self.visit(inner, path+(index,), out)
