"""
Build the generated implementation as a structure first and spell it as tokens last.

Every token comes from a constructor (ident, punct, literal) and every delimiter is
emitted in a matched pair by the same method, so the output is always one complete,
balanced item that a host can splice in as-is.
"""
from typing import NamedTuple, Optional
from ..scanning.interface import Token, TokenStream, ident, punct, literal
from .extractor import GenericParameterList
from .template import Configuration, render_message, quote

TRAIT_NAME = 'HelloMacro'
METHOD_NAME = 'hello_macro'

class ImplItem(NamedTuple):
	"""
	impl<BOUND> TRAIT for NAME<BARE> where ... {
		fn METHOD() { println!("{}", MESSAGE); }
	}
	"""
	trait: str
	name: Token
	generics: GenericParameterList
	method: str
	message: str

	def header(self) -> list[Token]:
		tokens = [ident('impl')] + self.generics.bound_tokens()
		tokens += [ident(self.trait), ident('for'), self.name] + self.generics.bare_tokens()
		if self.generics.where_clause:
			tokens += [ident('where')] + list(self.generics.where_clause)
		return tokens

	def body(self) -> list[Token]:
		call = [ident('println'), punct('!')] + _delimited('(', [literal('"{}"'), punct(','), literal(quote(self.message))]) + [punct(';')]
		return [ident('fn'), ident(self.method)] + _delimited('(', []) + _delimited('{', call)

	def to_tokens(self) -> TokenStream:
		return TokenStream(self.header() + _delimited('{', self.body()))

_CLOSE = {'(': ')', '[': ']', '{': '}'}

def _delimited(opener:str, inside:list[Token]) -> list[Token]:
	return [punct(opener)] + inside + [punct(_CLOSE[opener])]


def build(name:Token, generics:GenericParameterList, config:Optional[Configuration]=None) -> ImplItem:
	config = config or Configuration()
	message = render_message(config.template(), name.text, span=config.span)
	return ImplItem(TRAIT_NAME, name, generics, METHOD_NAME, message)

def generate(name:Token, generics:GenericParameterList, config:Optional[Configuration]=None) -> TokenStream:
	""" Render the implementation of the trait for the named type. Raises TemplateError for a bad override. """
	return build(name, generics, config).to_tokens()
