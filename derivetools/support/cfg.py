"""
Conditional compilation: deciding whether `#[cfg(...)]` lets an item through.

A predicate is a bare name (`unix`, `debug_assertions`), a key-value pair
(`target_os = "linux"`, `feature = "serde"`), or a combination with
`all(...)`, `any(...)`, and `not(...)`. Evaluating one is a lookup in a
fixed table of what is "set" -- there is nothing dynamic about it.
"""
import platform, sys
from typing import Iterable, Optional
from ..scanning.interface import Token, IDENT, LITERAL
from ..parsing.interface import ParseError, UnexpectedTokenError
from ..parsing.declaration import Cursor
from ..generation.template import TemplateError, unquote

_OS_NAMES = {'win32': 'windows', 'cygwin': 'windows', 'darwin': 'macos'}
_ARCH_NAMES = {'amd64': 'x86_64', 'x64': 'x86_64', 'arm64': 'aarch64', 'i386': 'x86', 'i686': 'x86'}

class CfgContext:
	"""
	flags: the names that are set on their own, like `unix` or `test`.
	values: for each key, the set of values it has. (Keys like `feature` have many.)
	"""
	def __init__(self, flags:Iterable[str]=(), values:Optional[dict]=None):
		self.flags = frozenset(flags)
		self.values = {key: frozenset([v] if isinstance(v, str) else v) for key, v in (values or {}).items()}

	@classmethod
	def for_host(cls, *, debug=True, features:Iterable[str]=()) -> "CfgContext":
		""" Describe the machine this interpreter runs on, the way a compiler targeting it would. """
		target_os = _OS_NAMES.get(sys.platform, sys.platform.rstrip('0123456789'))
		family = 'windows' if target_os == 'windows' else 'unix'
		machine = platform.machine().lower()
		flags = [family] + (['debug_assertions'] if debug else [])
		return cls(flags, {
			'target_os': target_os,
			'target_family': family,
			'target_arch': _ARCH_NAMES.get(machine, machine),
			'target_pointer_width': '64' if sys.maxsize > 2**32 else '32',
			'target_endian': sys.byteorder,
			'feature': features,
		})

	def resolve(self, name:str, value:str=None) -> bool:
		if value is None: return name in self.flags
		return value in self.values.get(name, ())

	def evaluate(self, tokens:Iterable[Token]) -> bool:
		""" Evaluate the tokens inside `cfg( ... )`. Raises ParseError if they are not a predicate. """
		tokens = tuple(tokens)
		cursor = Cursor(tokens)
		try: result = self.__predicate(cursor)
		except RecursionError: raise ParseError("Predicate nested too deeply.", tokens[0]) from None
		if not cursor.at_end(): raise UnexpectedTokenError(cursor.peek(), "the end of the predicate")
		return result

	def __predicate(self, cursor:Cursor) -> bool:
		name = cursor.expect(IDENT, "a configuration predicate")
		if cursor.accept('='):
			value = cursor.expect(LITERAL, "a string after '='")
			try: text = unquote(value)
			except TemplateError as ex: raise ParseError(ex.message, value) from None
			return self.resolve(name.text, text)
		following = cursor.peek()
		if name.text in ('all', 'any', 'not') and following is not None and following.kind == '(':
			operands = self.__operands(cursor)
			if name.text == 'all': return all(operands)
			if name.text == 'any': return any(operands)
			if len(operands) != 1: raise ParseError("not(...) takes exactly one predicate.", name)
			return not operands[0]
		return self.resolve(name.text)

	def __operands(self, cursor:Cursor) -> list[bool]:
		cursor.expect('(')
		operands = []
		while cursor.accept(')') is None:
			operands.append(self.__predicate(cursor))
			if cursor.accept(',') is None:
				cursor.expect(')', "',' or ')'")
				break
		return operands
