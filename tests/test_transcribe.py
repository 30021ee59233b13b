import unittest
from treemacro.interface import Span, TokenBudgetExceeded, UnboundMetavariable, RepetitionCountMismatch
from treemacro.trees import build_forest, flatten
from treemacro.rules import compile_pattern, compile_template
from treemacro.matching import Matcher
from treemacro.transcribe import Transcriber
from treemacro.reader import tokenize

SITE = Span(100, 120)

def instantiate(pattern, argument, template, *, context=7, charge=None):
	(group,) = build_forest(tokenize(argument))
	env = Matcher().match(compile_pattern('m', tokenize(pattern)), group)
	kwargs = {} if charge is None else {'charge': charge}
	transcriber = Transcriber(env, context, SITE, **kwargs)
	return flatten(transcriber.transcribe(compile_template('m', tokenize(template))))

def texts(tokens): return [t.text for t in tokens]

class TestTranscriber(unittest.TestCase):
	def test_literals_are_tagged(self):
		out = instantiate("($x:ident)", "(b)", "let a = $x ;")
		self.assertEqual(['let', 'a', '=', 'b', ';'], texts(out))
		self.assertEqual([7, 7, 7, 0, 7], [t.context for t in out])
		self.assertEqual({SITE}, {t.site for t in out})
	
	def test_captures_are_not_retagged(self):
		argument = "((p q))"
		(group,) = build_forest(tokenize(argument))
		original = flatten(group.items)
		out = instantiate("($x:tt)", argument, "$x")
		self.assertEqual([(t.kind, t.text, t.span, t.context) for t in original], [(t.kind, t.text, t.span, t.context) for t in out])
	
	def test_repetition_with_separator(self):
		for argument, expect in [
			("()", []),
			("(1)", ['f', '(', '1', ')']),
			("(1, 2)", ['f', '(', '1', ')', ';', 'f', '(', '2', ')']),
		]:
			with self.subTest(argument=argument):
				self.assertEqual(expect, texts(instantiate("($($x:literal),*)", argument, "$(f($x));*")))
	
	def test_outer_variable_repeats_inside(self):
		out = instantiate("($k:ident : $($v:literal)*)", "(key : 1 2)", "$( $k = $v ; )*")
		self.assertEqual(['key', '=', '1', ';', 'key', '=', '2', ';'], texts(out))
	
	def test_nested_repetition(self):
		out = instantiate("($( [ $($y:tt)* ] ),*)", "([a b], [], [c])", "$( { $($y),* } )*")
		self.assertEqual(['{', 'a', ',', 'b', '}', '{', '}', '{', 'c', '}'], texts(out))
	
	def test_count_mismatch(self):
		with self.assertRaises(RepetitionCountMismatch):
			instantiate("($($a:literal)* ; $($b:literal)*)", "(1 2 3 ; 4 5)", "$( $a $b )*")
	
	def test_unbound(self):
		with self.assertRaises(UnboundMetavariable):
			instantiate("($x:tt)", "(1)", "$z")
		with self.assertRaises(UnboundMetavariable):
			instantiate("($($x:tt)*)", "(1 2)", "$x")
	
	def test_budget(self):
		spent = []
		def charge(n):
			spent.append(n)
			if sum(spent) > 5: raise TokenBudgetExceeded("too many")
		self.assertEqual(3, len(instantiate("($x:tt)", "((1))", "$x", charge=charge)))
		spent.clear()
		with self.assertRaises(TokenBudgetExceeded):
			instantiate("($x:tt)", "((1))", "$x $x", charge=charge)

if __name__ == '__main__':
	unittest.main()
