import unittest
from treemacro.interface import make_token, IDENT, UnboundMetavariable, RepetitionCountMismatch
from treemacro.trees import Leaf
from treemacro.bindings import Fragment, Sequence, Environment

def frag(text):
	return Fragment((Leaf(make_token(IDENT, text)),))

def seq(*items):
	return Sequence(tuple(items))

class TestEnvironment(unittest.TestCase):
	def setUp(self) -> None:
		self.env = Environment({
			'a': frag('a'),
			'xs': seq(frag('x0'), frag('x1')),
			'ys': seq(frag('y0')),
			'm': seq(seq(frag('m00'), frag('m01')), seq(frag('m10'))),
		})
	
	def text(self, name, path=()):
		return [t.token.text for t in self.env.lookup(name, path)]
	
	def test_plain_lookup(self):
		self.assertEqual(['a'], self.text('a'))
		assert 'a' in self.env
		assert 'zz' not in self.env
	
	def test_prefix_compatible(self):
		# A variable captured outside a repetition may be used within one.
		self.assertEqual(['a'], self.text('a', (1,)))
		self.assertEqual(['a'], self.text('a', (1, 0)))
		self.assertEqual(['x1'], self.text('xs', (1,)))
		self.assertEqual(['x1'], self.text('xs', (1, 5)))
		self.assertEqual(['m10'], self.text('m', (1, 0)))
	
	def test_still_repeating(self):
		with self.assertRaises(UnboundMetavariable):
			self.env.lookup('xs')
		with self.assertRaises(UnboundMetavariable):
			self.env.lookup('m', (0,))
	
	def test_unbound(self):
		with self.assertRaises(UnboundMetavariable):
			self.env.lookup('nope')
	
	def test_repetition_count(self):
		self.assertEqual(2, self.env.repetition_count(['xs', 'a']))
		self.assertEqual(2, self.env.repetition_count(['m']))
		self.assertEqual(2, self.env.repetition_count(['m'], (0,)))
		self.assertEqual(1, self.env.repetition_count(['m'], (1,)))
		self.assertEqual(2, self.env.repetition_count(['m', 'xs']))
	
	def test_count_mismatch(self):
		with self.assertRaises(RepetitionCountMismatch) as cm:
			self.env.repetition_count(['xs', 'ys'])
		self.assertIn("$xs repeats 2 times", str(cm.exception))
		self.assertIn("$ys repeats 1 times", str(cm.exception))
	
	def test_nothing_repeats(self):
		with self.assertRaises(UnboundMetavariable):
			self.env.repetition_count(['a'])
		with self.assertRaises(UnboundMetavariable):
			self.env.repetition_count(['xs'], (0,))

if __name__ == '__main__':
	unittest.main()
