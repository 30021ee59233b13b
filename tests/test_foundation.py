import unittest
from treemacro.support.foundation import allocate, chain, Visitor

class Base: pass
class Derived(Base): pass

class Greeter(Visitor):
	def visit_Base(self, host, suffix): return "base"+suffix
	def visit_int(self, host, suffix): return "int"+suffix

class TestFoundation(unittest.TestCase):
	def test_allocate(self):
		things = ['a']
		self.assertEqual(1, allocate(things, 'b'))
		self.assertEqual(['a', 'b'], things)
	
	def test_chain(self):
		parent = {3: 1, 1: 0, 0: None}
		self.assertEqual([3, 1, 0], list(chain(3, parent.get)))
		self.assertEqual([], list(chain(None, parent.get)))
	
	def test_visitor_falls_back_along_mro(self):
		g = Greeter()
		self.assertEqual("int!", g.visit(7, "!"))
		self.assertEqual("base?", g.visit(Derived(), "?"))
		self.assertEqual("int.", g.visit(True, ".")) # bool is an int
		with self.assertRaises(RuntimeError):
			g.visit("neither", "")

if __name__ == '__main__':
	unittest.main()
