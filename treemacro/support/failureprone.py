"""
This module is all about easing over the process to display where things go wrong.

Tokens only know their character offsets. When it's time to tell a human about a problem,
we need line and column numbers, the offending line itself, and a little picture pointing
at the trouble. The SourceText handles the first two; `illustration` draws the picture.

Macro expansion adds a wrinkle: the trouble might be in text that a macro produced, so the
useful thing to show is the invocation site, and the invocation enclosing that, and so on.
An Issue carries any number of pieces of Evidence for exactly that reason.

LINE_BREAK knows the usual line-ending conventions. Nobody has asked for more.
"""

import bisect, re, sys
from typing import NamedTuple, Any
from enum import Enum

LINE_BREAK = re.compile(r'\r\n?|\n')

class Severity(Enum):
	NOTICE = "Notice"
	WARNING = "Warning"
	ERROR = "Error"

class Evidence(NamedTuple):
	slice:slice
	caption: str = "here"

	def width(self): return self.slice.stop - self.slice.start

class Issue(NamedTuple):
	"""
	Contain all the information necessary to present an error, warning, notice, or whatever.

	phase: tells what portion of the interpretation process found the issue.
	severity: tells how bad the issue is.
	description: explains the issue in plain language.
	evidence: a dictionary:
		from "key" (as known to an assumed "fetch" function),
		to lists of ``Evidence`` objects relevant to that corresponding text.
	"""
	phase: str
	severity: Severity
	description: str
	evidence: dict[Any, list[Evidence]]

	def as_text(self, fetch):
		"""
		Generate a not-completely-terrible report in text-only format.
		"fetch" must take a key (from the evidence dictionary) and return a corresponding SourceText.
		"""
		lines = ["%s while %s: %s"%(self.severity.value, self.phase, self.description)]
		for key, evidence in self.evidence.items():
			source = fetch(key)
			if source.filename:
				lines.append("Excerpt from "+source.filename+" :")
			for e in evidence:
				row, col = source.find_row_col(e.slice.start)
				single_line = source.line_of_text(row)
				lines.append(illustration(single_line, col, e.width(), prefix='% 6d :'%row, caption=e.caption))
		return "\n".join(lines)

	def emit(self, fetch):
		""" Print to standard error the generated error text. """
		print(self.as_text(fetch), file=sys.stderr)

def illustration(single_line:str, start:int, width:int=0, *, prefix='', caption="near here") -> str:
	""" Builds up a picture of where something appears in a line of text. Useful for polite error messages. """
	blanks = ''.join(c if c == '\t' else ' ' for c in prefix + single_line[:start])
	underline_width = max(1, min(width, len(single_line)-start))
	underline = '^'*underline_width
	return prefix + single_line.rstrip() + '\n' + blanks + underline +" "+caption

class SourceText:
	""" Wrapper for source text: participates in half-respectable error-display with context. """
	def __init__(self, content:str, filename:str=None, first_line=1):
		self.content = content
		self.filename = filename
		self.first_line = first_line
		self.__bounds = None

	def __make_bounds(self):
		""" Lazily only find line breaks if it turns out to be necessary for a particular text. """
		if self.__bounds is None:
			inside = [m.end() for m in LINE_BREAK.finditer(self.content)]
			self.__bounds = [0] + inside + [len(self.content)]

	def find_row_col(self, index:int):
		""" Based on a character index offset from the start of text. Respects self.first_line. """
		self.__make_bounds()
		row = bisect.bisect_right(self.__bounds, index, hi=len(self.__bounds) - 1) - 1
		col = index - self.__bounds[row]
		return row+self.first_line, col

	def line_of_text(self, row):
		""" Argument respects self.first_line. """
		self.__make_bounds()
		r = max(0, row - self.first_line)
		return self.content[self.__bounds[r]:self.__bounds[r + 1]]

	def complaint(self, a_slice:slice, message:str):
		row, col = self.find_row_col(a_slice.start)
		prefix = "At" if self.filename is None else str(self.filename)+":"
		reference = "%s line %d, column %d: %s" % (prefix, row, col + 1, message)
		illustrated = illustration(self.line_of_text(row), col, a_slice.stop - a_slice.start, prefix=' >>> ')
		return "%s\n%s"%(reference, illustrated)

	def complain(self, a_slice:slice, message:str):
		print(self.complaint(a_slice, message), file=sys.stderr)
