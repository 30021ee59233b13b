"""
The pattern matcher.

Given an invocation's argument group and a rule's compiled pattern, walk both in lock-step.
The walk is a plain recursive descent with a cursor into the current sequence of trees.
There is no general backtracking: a repetition simply tries its body again and again,
and the first attempt that fails (after rolling back whatever it consumed, separator included)
ends the loop. The "any" fragment is greedy up to its anchors, which were fixed at
registration time. See rules.py for how those are determined.

A failed rule raises NoMatch, which is not fatal: `match_definition` moves on to the next
rule and keeps the reason for diagnostics. Hitting the repetition ceiling is a different
matter: that's an immediate, hard failure of the whole invocation.
"""

from typing import Optional
from .interface import NoMatch, NoMatchingRule, RepetitionLimitExceeded
from .trees import Leaf, Group, is_ident, is_literal
from .rules import Literal, Delimited, MetaVar, Repetition, Rule, MacroDefinition, ZERO_OR_ONE, ONE_OR_MORE
from .bindings import Fragment, Sequence, Environment
from .support.foundation import Visitor

def describe(tree) -> str:
	if isinstance(tree, Leaf): return "%s %r"%(tree.token.kind, tree.token.text)
	return "group %s...%s"%(tree.open.text, tree.close.text)

def _at(trees:tuple, pos:int):
	return trees[pos] if pos < len(trees) else None

def _fits_anchor(tree, anchor) -> bool:
	if isinstance(anchor, Literal): return isinstance(tree, Leaf) and tree.token.same_text(anchor.token)
	return isinstance(tree, Group) and tree.delimiter == anchor.open.text

class Matcher(Visitor):
	"""
	Each visit_* method takes (element, trees, pos, bindings), records any captures into
	`bindings`, and returns the new cursor position or raises NoMatch.
	"""
	def __init__(self, max_repetition_count:Optional[int]=None):
		self.max_repetition_count = max_repetition_count

	def match(self, pattern:tuple, argument:Group) -> Environment:
		""" The pattern must consume the argument group's contents exactly. """
		pos, bindings = self.match_sequence(pattern, argument.items, 0)
		if pos < len(argument.items):
			raise NoMatch("unexpected %s after the end of the pattern"%describe(argument.items[pos]), argument.items[pos].span)
		return Environment(bindings)

	def match_sequence(self, elements:tuple, trees:tuple, pos:int):
		bindings = {}
		for element in elements:
			pos = self.visit(element, trees, pos, bindings)
		return pos, bindings

	def fail(self, expected:str, trees:tuple, pos:int):
		tree = _at(trees, pos)
		if tree is None: raise NoMatch("expected %s, but the input ended"%expected)
		raise NoMatch("expected %s, found %s"%(expected, describe(tree)), tree.span)

	def visit_Literal(self, element:Literal, trees, pos, bindings):
		tree = _at(trees, pos)
		if isinstance(tree, Leaf) and tree.token.same_text(element.token): return pos+1
		self.fail(repr(element.token.text), trees, pos)

	def visit_Delimited(self, element:Delimited, trees, pos, bindings):
		tree = _at(trees, pos)
		if not (isinstance(tree, Group) and tree.delimiter == element.open.text):
			self.fail("a group %s...%s"%(element.open.text, element.close.text), trees, pos)
		inner_pos, inner = self.match_sequence(element.elements, tree.items, 0)
		if inner_pos < len(tree.items):
			self.fail(repr(element.close.text), tree.items, inner_pos)
		bindings.update(inner)
		return pos+1

	def visit_MetaVar(self, element:MetaVar, trees, pos, bindings):
		tree = _at(trees, pos)
		fragment = element.fragment
		if fragment == 'any':
			end = pos
			while end < len(trees) and not any(_fits_anchor(trees[end], a) for a in element.anchors):
				end += 1
			if end == pos: self.fail("tokens for $%s"%element.name, trees, pos)
			bindings[element.name] = Fragment(trees[pos:end])
			return end
		if fragment == 'ident': fits = is_ident(tree)
		elif fragment == 'literal': fits = is_literal(tree)
		else: fits = tree is not None
		if not fits: self.fail("%s for $%s"%(fragment, element.name), trees, pos)
		bindings[element.name] = Fragment((tree,))
		return pos+1

	def visit_Repetition(self, element:Repetition, trees, pos, bindings):
		iterations = []
		separator = element.separator
		while not (element.op == ZERO_OR_ONE and iterations):
			trial = pos
			if iterations and separator is not None:
				tree = _at(trees, trial)
				if not (isinstance(tree, Leaf) and tree.token.same_text(separator)): break
				trial += 1
			try: after, inner = self.match_sequence(element.elements, trees, trial)
			except NoMatch: break
			if after == trial: break # No progress; another lap would go on forever.
			iterations.append(inner)
			pos = after
			if self.max_repetition_count is not None and len(iterations) > self.max_repetition_count:
				raise RepetitionLimitExceeded("repetition matched more than %d times"%self.max_repetition_count, element.token.span)
		if element.op == ONE_OR_MORE and not iterations:
			self.fail("at least one repetition", trees, pos)
		for name in element.names:
			bindings[name] = Sequence(tuple(it[name] for it in iterations))
		return pos

def match_definition(definition:MacroDefinition, argument:Group, matcher:Matcher=None) -> tuple[int, Rule, Environment]:
	"""
	Try each rule in declaration order; the first that matches wins.
	Returns (rule_index, rule, environment), or raises NoMatchingRule carrying every rule's NoMatch.
	"""
	if matcher is None: matcher = Matcher()
	reasons = []
	for index, rule in enumerate(definition.rules):
		try: environment = matcher.match(rule.pattern, argument)
		except NoMatch as nm: reasons.append(nm)
		else: return index, rule, environment
	raise NoMatchingRule(definition.name, reasons, argument.span)
