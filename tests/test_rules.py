import unittest
from treemacro.interface import RegistrationError, DuplicateMacroName, AmbiguousPattern, UnbalancedDelimiter
from treemacro.rules import Literal, Delimited, MetaVar, Repetition, compile_pattern, compile_template
from treemacro.table import DefinitionTable, register_macro
from treemacro.reader import tokenize

def rule(pattern, template):
	return tokenize(pattern), tokenize(template)

class TestPatternCompilation(unittest.TestCase):
	def test_outer_delimiter_is_dropped(self):
		for text in ["($x:tt)", "[$x:tt]", "{$x:tt}"]:
			with self.subTest(text=text):
				(element,) = compile_pattern('m', tokenize(text))
				self.assertEqual(MetaVar, type(element))
				self.assertEqual(('x', 'tt'), (element.name, element.fragment))
	
	def test_structure(self):
		elements = compile_pattern('m', tokenize("(a [$b:ident] $($c:literal),+)"))
		self.assertEqual([Literal, Delimited, Repetition], [type(e) for e in elements])
		repetition = elements[2]
		self.assertEqual(',', repetition.separator.text)
		self.assertEqual('+', repetition.op)
		self.assertEqual(('c',), repetition.names)
	
	def test_nested_repetition_names(self):
		(outer,) = compile_pattern('m', tokenize("($( $a:ident [ $($b:tt)* ] );*)"))
		self.assertEqual(('a', 'b'), outer.names)
		self.assertEqual(';', outer.separator.text)
	
	def test_lone_sigil_is_literal(self):
		elements = compile_pattern('m', tokenize("($ 1)"))
		self.assertEqual([Literal, Literal], [type(e) for e in elements])
	
	def test_anchors(self):
		a, semi, b = compile_pattern('m', tokenize("($a:any ; $b:any)"))
		self.assertEqual(';', a.anchors[0].token.text)
		self.assertEqual((), b.anchors)
		(repetition,) = compile_pattern('m', tokenize("($($x:any),*)"))
		self.assertEqual([','], [anchor.token.text for anchor in repetition.elements[0].anchors])
		(repetition, close) = compile_pattern('m', tokenize("($($x:any),* ;)"))
		self.assertEqual([',', ';'], [anchor.token.text for anchor in repetition.elements[0].anchors])
		a, group = compile_pattern('m', tokenize("($a:any {})"))
		self.assertEqual((group,), a.anchors)
	
	def test_bad_patterns(self):
		for text, exception in [
			("($x)", RegistrationError), # missing fragment class
			("($x:expr)", RegistrationError), # unknown fragment class
			("($($x:tt))", RegistrationError), # repetition without operator
			("($()*)", RegistrationError), # empty repetition
			("($a:tt $a:tt)", AmbiguousPattern),
			("($a:any $b:any)", AmbiguousPattern),
			("($a:any $b:ident)", AmbiguousPattern),
			("($a:any $($b:tt)*)", AmbiguousPattern),
			("($($a:any)*)", AmbiguousPattern),
			("($($a:any),* $b:tt)", AmbiguousPattern),
		]:
			with self.subTest(text=text):
				with self.assertRaises(exception):
					compile_pattern('m', tokenize(text))
	
	def test_separator_free_any_with_fixed_start(self):
		(repetition,) = compile_pattern('m', tokenize("($(let $a:any)*)"))
		self.assertEqual(['let'], [anchor.token.text for anchor in repetition.elements[1].anchors])

class TestTemplateCompilation(unittest.TestCase):
	def test_structure(self):
		elements = compile_template('m', tokenize("$x + $($y),* ($z)"))
		self.assertEqual([MetaVar, Literal, Repetition, Delimited], [type(e) for e in elements])
		self.assertIsNone(elements[0].fragment)
		self.assertEqual(('y',), elements[2].names)
		self.assertEqual('(', elements[3].open.text)
	
	def test_colon_after_reference_is_literal(self):
		elements = compile_template('m', tokenize("$x:ident"))
		self.assertEqual([MetaVar, Literal, Literal], [type(e) for e in elements])
	
	def test_empty_template(self):
		self.assertEqual((), compile_template('m', []))

class TestDefinitionTable(unittest.TestCase):
	def setUp(self) -> None:
		self.table = DefinitionTable()
	
	def test_register_and_lookup(self):
		definition = register_macro(self.table, 'id', [rule("($x:tt)", "$x")])
		self.assertIs(definition, self.table.lookup('id'))
		self.assertEqual(1, len(definition.rules))
		self.assertIsNone(self.table.lookup('nope'))
		assert 'id' in self.table
		self.assertEqual(['id'], self.table.names())
	
	def test_duplicate(self):
		self.table.register('id', [rule("($x:tt)", "$x")])
		with self.assertRaises(DuplicateMacroName):
			self.table.register('id', [rule("($x:ident)", "$x")])
	
	def test_failed_registration_registers_nothing(self):
		with self.assertRaises(AmbiguousPattern):
			self.table.register('bad', [rule("($x:tt)", "$x"), rule("($a:any $b:any)", "")])
		self.assertIsNone(self.table.lookup('bad'))
		self.assertEqual(0, len(self.table))
	
	def test_unbalanced_rule(self):
		with self.assertRaises(UnbalancedDelimiter):
			self.table.register('bad', [rule("($x:tt", "$x")])
		with self.assertRaises(UnbalancedDelimiter):
			self.table.register('bad', [rule("($x:tt)", "($x")])
		self.assertIsNone(self.table.lookup('bad'))
	
	def test_needs_a_rule(self):
		with self.assertRaises(RegistrationError):
			self.table.register('empty', [])
	
	def test_sealed(self):
		self.table.seal()
		assert self.table.is_sealed()
		with self.assertRaises(RegistrationError):
			self.table.register('id', [rule("($x:tt)", "$x")])

if __name__ == '__main__':
	unittest.main()
