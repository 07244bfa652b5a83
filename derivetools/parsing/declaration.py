"""
A small hand-written recursive-descent parser for exactly one type declaration.

The interesting parts of a declaration, for the purpose of deriving an implementation,
are the kind of item, its name, its generic parameters, and its where-clause. Attributes
come along for the ride because configuration and conditional compilation live there.
The body (fields or variants) is checked for balanced delimiters and otherwise kept
as raw tokens: nothing downstream needs to understand it.

The parser either accounts for every token in the input or raises ParseError.
"""
from enum import Enum
from typing import NamedTuple, Optional, Iterable
from ..scanning.interface import Token, TokenStream, IDENT, LIFETIME
from .interface import ParseError, EmptyInputError, UnexpectedTokenError, UnexpectedEndOfTextError, UnsupportedItemError, TrailingItemError

class ItemKind(Enum):
	STRUCT = 'struct'
	ENUM = 'enum'
	UNION = 'union'

class ParamKind(Enum):
	LIFETIME = 'lifetime'
	TYPE = 'type'
	CONST = 'const'

class Attribute(NamedTuple):
	"""
	One outer attribute, `#[path ...]`.
	delimiter: '(' '[' '{' when the path is followed by a group, '=' for `path = value`, else None.
	arguments: the tokens inside the group, or after the '='.
	"""
	path: str
	delimiter: Optional[str]
	arguments: tuple[Token, ...]
	span: Optional[tuple[int, int]]

class GenericParam(NamedTuple):
	kind: ParamKind
	name: Token
	bounds: tuple[Token, ...]   # For a const parameter, this is its type.
	default: tuple[Token, ...]

class Declaration(NamedTuple):
	kind: ItemKind
	name: Token
	generics: tuple[GenericParam, ...]
	where_clause: tuple[Token, ...]
	attributes: tuple[Attribute, ...]
	visibility: tuple[Token, ...]
	body: tuple[Token, ...]

	def attributes_named(self, path:str) -> list[Attribute]:
		return [a for a in self.attributes if a.path == path]

KEYWORDS = frozenset("""
	as async await break const continue crate dyn else enum extern false fn for if impl in let loop
	match mod move mut pub ref return self Self static struct super trait true type unsafe use where while
	abstract become box do final macro override priv try typeof unsized virtual yield
""".split())

OPENERS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = frozenset(OPENERS.values())


class Cursor:
	""" Walks a token sequence; supplies the primitive moves of recursive descent. """

	def __init__(self, tokens:Iterable[Token]):
		self.tokens = tuple(tokens)
		self.at = 0

	def peek(self, ahead=0) -> Optional[Token]:
		index = self.at + ahead
		if index < len(self.tokens): return self.tokens[index]

	def at_end(self) -> bool:
		return self.at >= len(self.tokens)

	def end_span(self):
		""" A zero-width span just past the last token, for complaints about running out. """
		for token in reversed(self.tokens):
			if token.span is not None: return token.span[1], token.span[1]

	def advance(self, expected:str) -> Token:
		token = self.peek()
		if token is None: raise UnexpectedEndOfTextError(expected, span=self.end_span())
		self.at += 1
		return token

	def accept(self, kind:str) -> Optional[Token]:
		token = self.peek()
		if token is not None and token.kind == kind:
			self.at += 1
			return token

	def expect(self, kind:str, expected:str=None) -> Token:
		expected = expected or repr(kind)
		token = self.advance(expected)
		if token.kind != kind: raise UnexpectedTokenError(token, expected)
		return token

	def group(self) -> tuple[Token, ...]:
		"""
		Consume one balanced delimiter group, starting with the opener under the cursor,
		and return all its tokens (delimiters included).
		"""
		start = self.at
		opener = self.advance("a delimited group")
		if opener.kind not in OPENERS: raise UnexpectedTokenError(opener, "one of '(', '[', or '{'")
		pending = [OPENERS[opener.kind]]
		while pending:
			token = self.advance(repr(pending[-1]))
			if token.kind in OPENERS: pending.append(OPENERS[token.kind])
			elif token.kind in CLOSERS:
				if token.kind != pending[-1]: raise UnexpectedTokenError(token, repr(pending[-1]))
				pending.pop()
		return self.tokens[start:self.at]

	def until(self, stops:frozenset, expected:str, *, or_end=False) -> tuple[Token, ...]:
		"""
		Consume tokens up to (not including) the first stop-token found at nesting depth zero.
		Angle brackets count as nesting so that `Iterator<Item = T>` stays in one piece.
		Running out of tokens is an error unless `or_end` says it's fine.
		"""
		start, angles = self.at, 0
		while True:
			token = self.peek()
			if token is None:
				if or_end: break
				raise UnexpectedEndOfTextError(expected, span=self.end_span())
			if angles == 0 and token.kind in stops: break
			if token.kind in OPENERS: self.group()
			elif token.kind in CLOSERS: raise UnexpectedTokenError(token, expected)
			else:
				if token.kind == '<': angles += 1
				elif token.kind == '>': angles -= 1
				self.at += 1
		return self.tokens[start:self.at]


def split_commas(tokens:Iterable[Token]) -> list[tuple[Token, ...]]:
	""" Split at the commas found at nesting depth zero. A trailing comma adds nothing. """
	cursor, parts = Cursor(tokens), []
	while not cursor.at_end():
		parts.append(cursor.until(frozenset(','), "','", or_end=True))
		cursor.accept(',')
	return parts

def make_attribute(hash_token:Token, bracket:tuple[Token, ...]) -> Attribute:
	""" Interpret the tokens of `#[ ... ]` (bracket includes the square brackets). """
	inner = Cursor(bracket[1:-1])
	path = []
	while True:
		token = inner.peek()
		if token is None or token.kind not in (IDENT, '::'): break
		path.append(token.text)
		inner.at += 1
	if not path: raise UnexpectedTokenError(inner.peek() or bracket[-1], "an attribute name")
	span = None
	if hash_token.span and bracket[-1].span: span = hash_token.span[0], bracket[-1].span[1]
	if inner.at_end(): return Attribute(''.join(path), None, (), span)
	token = inner.peek()
	if token.kind == '=':
		inner.at += 1
		arguments = inner.tokens[inner.at:]
		if not arguments: raise UnexpectedEndOfTextError("a value after '='", span=token.span)
		return Attribute(''.join(path), '=', arguments, span)
	group = inner.group()
	if not inner.at_end(): raise UnexpectedTokenError(inner.peek(), "']'")
	return Attribute(''.join(path), group[0].kind, group[1:-1], span)


def outer_attributes(cursor:Cursor) -> list[Attribute]:
	attributes = []
	while cursor.peek() is not None and cursor.peek().kind == '#':
		hash_token = cursor.advance("'#'")
		bang = cursor.accept('!')
		if bang is not None: raise UnexpectedTokenError(bang, "an outer attribute (inner attributes belong to modules)")
		if cursor.peek() is None or cursor.peek().kind != '[':
			cursor.expect('[', "'[' to begin an attribute")
		attributes.append(make_attribute(hash_token, cursor.group()))
	return attributes

def visibility(cursor:Cursor) -> tuple[Token, ...]:
	start = cursor.at
	token = cursor.peek()
	if token is not None and token.is_word('pub'):
		cursor.at += 1
		following = cursor.peek()
		if following is not None and following.kind == '(': cursor.group()
	return cursor.tokens[start:cursor.at]

def type_name(cursor:Cursor) -> Token:
	name = cursor.expect(IDENT, "a type name")
	if name.text in KEYWORDS: raise UnexpectedTokenError(name, "a type name (not a keyword)")
	return name

def generic_param(cursor:Cursor) -> GenericParam:
	outer_attributes(cursor) # Attributes on parameters do not survive into the implementation.
	token = cursor.peek()
	if token is None: raise UnexpectedEndOfTextError("a generic parameter", span=cursor.end_span())
	if token.kind == LIFETIME:
		cursor.at += 1
		bounds = cursor.until(frozenset(',>'), "a lifetime bound") if cursor.accept(':') else ()
		return GenericParam(ParamKind.LIFETIME, token, bounds, ())
	if token.is_word('const'):
		cursor.at += 1
		name = type_name(cursor)
		cursor.expect(':', "':' and the type of const parameter %r" % name.text)
		bounds = cursor.until(frozenset(',>='), "a type")
		if not bounds: raise UnexpectedTokenError(cursor.peek(), "a type")
		return GenericParam(ParamKind.CONST, name, bounds, default_value(cursor))
	if token.kind == IDENT:
		name = type_name(cursor)
		bounds = cursor.until(frozenset(',>='), "a trait bound") if cursor.accept(':') else ()
		return GenericParam(ParamKind.TYPE, name, bounds, default_value(cursor))
	raise UnexpectedTokenError(token, "a generic parameter")

def default_value(cursor:Cursor) -> tuple[Token, ...]:
	equals = cursor.accept('=')
	if equals is None: return ()
	default = cursor.until(frozenset(',>'), "a default")
	if not default: raise UnexpectedTokenError(cursor.peek(), "a default after '='")
	return default

def generics(cursor:Cursor) -> tuple[GenericParam, ...]:
	if cursor.accept('<') is None: return ()
	params = []
	while cursor.accept('>') is None:
		params.append(generic_param(cursor))
		if cursor.accept(',') is None:
			cursor.expect('>', "',' or '>'")
			break
	return tuple(params)

def where_clause(cursor:Cursor) -> tuple[Token, ...]:
	token = cursor.peek()
	if token is None or not token.is_word('where'): return ()
	cursor.at += 1
	return cursor.until(frozenset('{;'), "'{' or ';' after the where-clause")

def item_kind(cursor:Cursor) -> ItemKind:
	keyword = cursor.advance("'struct', 'enum', or 'union'")
	if keyword.is_word('struct'): return ItemKind.STRUCT
	if keyword.is_word('enum'): return ItemKind.ENUM
	# `union` is only a keyword when a name follows it.
	following = cursor.peek()
	if keyword.is_word('union') and following is not None and following.kind == IDENT: return ItemKind.UNION
	if keyword.kind == IDENT: raise UnsupportedItemError(keyword)
	raise UnexpectedTokenError(keyword, "'struct', 'enum', or 'union'")

def declaration(cursor:Cursor) -> Declaration:
	attributes = outer_attributes(cursor)
	vis = visibility(cursor)
	kind = item_kind(cursor)
	name = type_name(cursor)
	params = generics(cursor)
	token = cursor.peek()
	if kind is ItemKind.STRUCT and token is not None and token.kind == '(':
		body = cursor.group()
		where = where_clause(cursor)
		cursor.expect(';', "';' after a tuple struct")
	else:
		where = where_clause(cursor)
		if kind is ItemKind.STRUCT and cursor.accept(';'): body = ()
		else:
			if cursor.peek() is not None and cursor.peek().kind != '{':
				raise UnexpectedTokenError(cursor.peek(), "'{' to begin the body of %s %s" % (kind.value, name.text))
			body = cursor.group()
	return Declaration(kind, name, params, where, tuple(attributes), vis, body)


def parse(tokens:TokenStream) -> Declaration:
	"""
	Recognize exactly one struct, enum, or union declaration.
	Anything else -- nothing at all, some other kind of item, or more than one item -- is a ParseError.
	"""
	cursor = Cursor(tokens)
	if cursor.at_end(): raise EmptyInputError()
	node = declaration(cursor)
	if not cursor.at_end(): raise TrailingItemError(cursor.peek())
	return node
