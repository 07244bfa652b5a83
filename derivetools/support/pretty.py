""" Bits and bobs in support of showing generated code to people. """
from typing import Iterable
from ..scanning.interface import Token, render

def layout(tokens:Iterable[Token], indent='    ') -> str:
	"""
	Lay a token stream out over several lines: a break after each `{` and `;`,
	and each `}` on a line of its own (along with a `;` right after it).
	"""
	lines, line, depth = [], [], 0
	def flush():
		if line: lines.append(indent*depth + render(line))
		line.clear()
	for token in tokens:
		if token.kind == '}':
			flush()
			depth -= 1
		elif line and line[-1].kind == '}' and token.kind != ';':
			flush()
		line.append(token)
		if token.kind == '{':
			flush()
			depth += 1
		elif token.kind == ';':
			flush()
	flush()
	return '\n'.join(lines)
