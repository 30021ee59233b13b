"""
The macro definition table: a name owns exactly one ordered list of rules.

All registration happens before any expansion. The expander seals whatever table it is
handed, after which the table is read-only; that is what lets independent invocations
share it without locks. There is no process-wide registry; callers pass the table around.
"""

from typing import Optional, Iterable
from .interface import DuplicateMacroName, RegistrationError
from .rules import MacroDefinition, compile_definition

class DefinitionTable:
	def __init__(self):
		self.__definitions: dict[str, MacroDefinition] = {}
		self.__sealed = False

	def register(self, name:str, rules:Iterable) -> MacroDefinition:
		"""
		`rules` is an iterable of (pattern, template) pairs, each given as trees or as flat tokens.
		Either the whole macro registers, or (upon any RegistrationError) none of it does.
		"""
		if self.__sealed: raise RegistrationError(name, "the definition table is sealed; register before expanding")
		if name in self.__definitions: raise DuplicateMacroName(name, "already defined")
		definition = compile_definition(name, rules)
		self.__definitions[name] = definition
		return definition

	def lookup(self, name:str) -> Optional[MacroDefinition]:
		return self.__definitions.get(name)

	def seal(self): self.__sealed = True
	def is_sealed(self) -> bool: return self.__sealed

	def __contains__(self, name): return name in self.__definitions
	def __len__(self): return len(self.__definitions)
	def names(self) -> list[str]: return sorted(self.__definitions)

def register_macro(table:DefinitionTable, name:str, rules:Iterable) -> MacroDefinition:
	""" Functional spelling of table.register(...) """
	return table.register(name, rules)
