"""
Tokens, token streams, and the contract between a scanner and its rules.

A token is a triple of "kind", source text, and span. For punctuation and
delimiters the kind IS the text, which keeps the parser's comparisons short.
Synthesized tokens (from the code generator) have no span.
"""
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, Iterable

INITIAL = 'INITIAL'

IDENT = 'ident'
LIFETIME = 'lifetime'
LITERAL = 'literal'

class ScannerBlocked(ValueError):
	""" No rule matches at `position` (an offset into the text) in start condition `condition`. """
	def __init__(self, position:int, condition:str):
		super().__init__(position, condition)
		self.position, self.condition = position, condition


class Token(NamedTuple):
	kind: str
	text: str
	span: Optional[tuple[int, int]] = None

	def is_word(self, *words) -> bool:
		return self.kind == IDENT and self.text in words

def ident(text:str) -> Token: return Token(IDENT, text)
def punct(text:str) -> Token: return Token(text, text)
def literal(text:str) -> Token: return Token(LITERAL, text)


class Bindings(ABC):
	""" What a scanner calls upon as it recognizes (or fails to recognize) each lexeme. """

	@abstractmethod
	def on_match(self, yy, rule_id:int): ...

	def on_stuck(self, yy):
		raise ScannerBlocked(yy.left, yy.condition)

# Glue rules for serializing: which tokens hug their neighbours.
_TIGHT_BEFORE = frozenset(', ; : . ) ] >'.split())
_TIGHT_AFTER = frozenset('( [ < . & # :: ! ? $'.split())
_CALL_LIKE = frozenset('( [ < ! ::'.split())

def spaced(left:Token, right:Token) -> bool:
	""" Should a blank separate these two adjacent tokens in rendered text? """
	if left.kind in _TIGHT_AFTER or right.kind in _TIGHT_BEFORE: return False
	if right.kind in _CALL_LIKE: return left.kind not in (IDENT, '>')
	return True

def render(tokens:Iterable[Token]) -> str:
	""" Join tokens into one line of source text with conventional spacing. """
	pieces, prior = [], None
	for token in tokens:
		if prior is not None and spaced(prior, token): pieces.append(' ')
		pieces.append(token.text)
		prior = token
	return ''.join(pieces)


class TokenStream:
	"""
	An immutable sequence of tokens: what crosses the boundary between the host and a derive.
	Equality ignores spans, so a stream compares equal to its own re-scan.
	"""
	__slots__ = ('__tokens',)

	def __init__(self, tokens:Iterable[Token]=()):
		self.__tokens = tuple(tokens)

	def __iter__(self): return iter(self.__tokens)
	def __len__(self): return len(self.__tokens)
	def __bool__(self): return bool(self.__tokens)

	def __getitem__(self, item):
		if isinstance(item, slice): return TokenStream(self.__tokens[item])
		return self.__tokens[item]

	def signature(self) -> tuple:
		return tuple((t.kind, t.text) for t in self.__tokens)

	def __eq__(self, other):
		if not isinstance(other, TokenStream): return NotImplemented
		return self.signature() == other.signature()

	def __hash__(self): return hash(self.signature())

	def __str__(self): return render(self.__tokens)

	def __repr__(self): return 'TokenStream(%r)' % str(self)

	def span(self) -> Optional[tuple[int, int]]:
		""" Extent of the source text covered, if the tokens came from a scan. """
		spans = [t.span for t in self.__tokens if t.span is not None]
		if spans: return spans[0][0], spans[-1][1]
