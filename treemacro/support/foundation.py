""" Small is beautiful. These algorithms need no introduction. """

def allocate(a_list:list, item):
	"""
	Append an item to a list, and return the new item's index in that list.
	Too frequent an idiom not to abbreviate.
	"""
	idx = len(a_list)
	a_list.append(item)
	return idx

def chain(start, link):
	"""
	Follow a linked structure from `start`, yielding each node, until `link` gives None.
	Parent pointers, static links, enclosing scopes: it's all the same walk.
	"""
	while start is not None:
		yield start
		start = link(start)

class Visitor:
	"""
	Visitor-pattern in Python, with fall-back to superclasses along the MRO.

	Actual visitation-algorithms will inherit from Visitor and then each
	`visit_Foo` method must call `self.visit(host.bar)` as appropriate. This
	is so that your visitation-algorithm is in control of which bits of an
	object-graph that it actually visits, and in what order.
	"""
	
	def visit(self, host, *args, **kwargs):
		method_name = 'visit_' + host.__class__.__name__
		try: method = getattr(self, method_name)
		except AttributeError:
			# NB: Multiple-inheritance with NamedTuple seems to confuse the __mro__.
			for cls in host.__class__.__mro__:
				fallback = 'visit_' + cls.__name__
				if hasattr(self, fallback):
					method = getattr(self, fallback)
					break
			else: raise
		return method(host, *args, **kwargs)
	
	def visit_object(self, host, *args, **kwargs):
		""" The element variants form a closed set: meeting anything else is a bug, not a case to handle. """
		raise RuntimeError("class %s neglects to handle %s"%(type(self).__name__, type(host).__name__))
