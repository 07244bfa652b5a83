"""
Turning character offsets into something a person can act on.

The scanner and parser deal only in offsets into the text. SourceText converts an
offset to a row and column and slices out the offending line; `illustration` draws
a row of carets underneath.

A Diagnostic is the one kind of failure that crosses the boundary back to the host.
It says which phase of expansion found the problem, explains it in plain language,
and remembers the expansion site (and, if known, the precise span) it belongs to.
Diagnostics are values: producing one never stops work on some other site.

Line breaks may be \\n, \\r, or \\r\\n; any of them ends a line.
"""

import bisect, re, sys
from typing import NamedTuple, Optional
from enum import Enum

LINEBREAK = re.compile(r'\r\n?|\n')

class Severity(Enum):
	NOTICE = "Notice"
	WARNING = "Warning"
	ERROR = "Error"

def illustration(single_line:str, start:int, width:int=0, *, prefix='', caption="near here") -> str:
	"""
	The line (minus its line break) with carets under columns start .. start+width.
	Tabs before the carets are kept so they line up in a terminal.
	"""
	line = single_line.rstrip()
	indent = ''.join('\t' if c == '\t' else ' ' for c in prefix + single_line[:start])
	carets = '^' * max(1, min(width, len(line) - start))
	return "%s%s\n%s%s %s" % (prefix, line, indent, carets, caption)

class SourceText:
	""" A text plus what it takes to point into it: a filename and the number of its first line. """
	def __init__(self, content:str, filename:str=None, first_line=1):
		self.content, self.filename, self.first_line = content, filename, first_line
		self.__starts = None

	def __line_starts(self) -> list[int]:
		# Computed on first use: most texts never need a complaint.
		if self.__starts is None:
			breaks = LINEBREAK.finditer(self.content)
			self.__starts = [0] + [m.end() for m in breaks] + [len(self.content)]
		return self.__starts

	def find_row_col(self, index:int) -> tuple[int, int]:
		starts = self.__line_starts()
		r = bisect.bisect_right(starts, index, hi=len(starts) - 1) - 1
		return r + self.first_line, index - starts[r]

	def line_of_text(self, row:int) -> str:
		starts = self.__line_starts()
		r = max(0, row - self.first_line)
		return self.content[starts[r]:starts[r + 1]]

	def complaint(self, span:tuple[int, int], message:str, caption="near here") -> str:
		left, right = span
		row, col = self.find_row_col(left)
		where = "At" if self.filename is None else "%s:" % self.filename
		picture = illustration(self.line_of_text(row), col, right - left, prefix=' >>> ', caption=caption)
		return "%s line %d, column %d: %s\n%s" % (where, row, col + 1, message, picture)


class Site(NamedTuple):
	""" Where an expansion was requested: a file (if any) and the span of the annotated item. """
	filename: Optional[str] = None
	span: Optional[tuple[int, int]] = None

	def __str__(self):
		where = self.filename or "<input>"
		return where if self.span is None else "%s[%d:%d]" % (where, *self.span)

class Diagnostic(NamedTuple):
	"""
	phase: which part of the expansion found the issue ("scanning", "parsing", "generating", ...)
	description: what is wrong, in plain language.
	site: the expansion site this diagnostic is scoped to.
	span: the precise offending region, when known; otherwise the whole site is to blame.
	"""
	phase: str
	description: str
	site: Site = Site()
	span: Optional[tuple[int, int]] = None
	severity: Severity = Severity.ERROR

	def focus(self) -> Optional[tuple[int, int]]:
		return self.span if self.span is not None else self.site.span

	def as_text(self, source:SourceText=None) -> str:
		""" One headline; with the source text at hand, also the offending line and a caret. """
		headline = "%s while %s %s: %s" % (self.severity.value, self.phase, self.site, self.description)
		focus = self.focus()
		if source is None or focus is None: return headline
		return headline + "\n" + source.complaint(focus, self.description, caption="here")

	def emit(self, source:SourceText=None):
		print(self.as_text(source), file=sys.stderr)
