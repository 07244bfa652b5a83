"""
Parsing Interface Definitions

Every parse failure is some kind of ParseError. Each one knows the token
it choked on (when there is one) so a report can point at the right place.
"""
from typing import Optional
from ..scanning.interface import Token

class ParseError(ValueError):
	gripe = "Malformed declaration."

	def __init__(self, message:str=None, token:Optional[Token]=None, *, span=None):
		self.message = message or self.gripe
		super().__init__(self.message)
		self.token = token
		self.span = span if span is not None or token is None else token.span

class EmptyInputError(ParseError):
	gripe = "Expected a declaration, but the input is empty."

class UnexpectedTokenError(ParseError):
	def __init__(self, token:Token, expected:str):
		super().__init__("Expected %s but found %r." % (expected, token.text), token)
		self.expected = expected

class UnexpectedEndOfTextError(ParseError):
	def __init__(self, expected:str, *, span=None):
		super().__init__("Expected %s but the input ended." % expected, span=span)
		self.expected = expected

class UnsupportedItemError(ParseError):
	def __init__(self, token:Token):
		super().__init__("Only a struct, enum, or union can be derived from; this is %r." % token.text, token)

class TrailingItemError(ParseError):
	def __init__(self, token:Token):
		super().__init__("Expected exactly one declaration, but more follows at %r." % token.text, token)
