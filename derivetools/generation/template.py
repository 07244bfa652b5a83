"""
The greeting template and where it comes from.

A template is ordinary text in which `{name}` stands for the type name, captured when the
implementation is generated. Doubled braces are literal braces. Nothing else is allowed
inside braces: an undefined placeholder is a TemplateError, not a surprise at run-time.

A declaration may override the default with a helper attribute:

	#[derive(HelloMacro)]
	#[hello_macro(message = "Welcome, {name}")]
	struct User;

(`message: "..."` is accepted as well.)
"""
import re
import string
from typing import NamedTuple, Optional, Iterable
from ..scanning.interface import Token, IDENT, LITERAL
from ..parsing.declaration import Attribute

DEFAULT_MESSAGE = "Hello, Macro! I'm a {name}!"
PLACEHOLDERS = frozenset(['name'])
HELPER_ATTRIBUTE = 'hello_macro'
OPTIONS = frozenset(['message'])

class TemplateError(ValueError):
	def __init__(self, message:str, *, span=None):
		super().__init__(message)
		self.message = message
		self.span = span

class Configuration(NamedTuple):
	message: Optional[str] = None
	span: Optional[tuple[int, int]] = None

	def template(self) -> str:
		return DEFAULT_MESSAGE if self.message is None else self.message


def render_message(template, name:str, *, span=None) -> str:
	if not isinstance(template, str):
		raise TemplateError("The message template must be a string, not %s." % type(template).__name__, span=span)
	try: pieces = list(string.Formatter().parse(template))
	except ValueError as ex: raise TemplateError("Malformed message template %r: %s." % (template, ex), span=span) from None
	for _, field, spec, conversion in pieces:
		if field is None: continue
		if field not in PLACEHOLDERS:
			what = "a positional placeholder '{}'" if field == '' else "the undefined placeholder {%s}" % field
			raise TemplateError("Message template %r uses %s; only {name} is available." % (template, what), span=span)
		if spec or conversion:
			raise TemplateError("Message template %r: placeholders take no conversion or format spec." % template, span=span)
	message = template.format(name=name)
	if any(0xD800 <= ord(c) <= 0xDFFF for c in message):
		raise TemplateError("Message template %r holds a lone surrogate, which no string literal can spell." % template, span=span)
	return message


### Rust string literals in and out.
_QUOTE = {'\\': '\\\\', '"': '\\"', '\n': '\\n', '\r': '\\r', '\t': '\\t', '\0': '\\0'}

def quote(text:str) -> str:
	""" Spell `text` as a Rust string literal. """
	def char(c):
		if c in _QUOTE: return _QUOTE[c]
		return c if c.isprintable() else '\\u{%x}' % ord(c)
	return '"' + ''.join(map(char, text)) + '"'

_SIMPLE_ESCAPE = {'n': '\n', 'r': '\r', 't': '\t', '\\': '\\', '0': '\0', "'": "'", '"': '"'}
_ESCAPE = re.compile(r'\\(?:([nrt\\0\'"])|x([0-7][0-9a-fA-F])|u\{([0-9a-fA-F_]{1,8})\}|\r?\n\s*|(.?))', re.S)
_RAW = re.compile(r'r(#*)"(.*)"\1\Z', re.S)

def unquote(token:Token) -> str:
	""" The value of a Rust string-literal token. Byte strings, C strings, and other literals are refused. """
	text = token.text
	if token.kind != LITERAL or not (text.startswith('"') or text.startswith('r')):
		raise TemplateError("Expected a string literal but found %r." % text, span=token.span)
	raw = _RAW.match(text)
	if raw: return raw.group(2)
	def escape(match):
		simple, byte, unicode, bogus = match.groups()
		if simple: return _SIMPLE_ESCAPE[simple]
		if byte: return chr(int(byte, 16))
		if unicode:
			codepoint = int(unicode.replace('_', ''), 16)
			if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
				raise TemplateError("Invalid unicode escape in %s." % text, span=token.span)
			return chr(codepoint)
		if bogus is not None: raise TemplateError("Unknown escape %r in %s." % ('\\' + bogus, text), span=token.span)
		return ''
	return _ESCAPE.sub(escape, text[1:-1])


def _entries(arguments:tuple[Token, ...]) -> Iterable[tuple[Token, ...]]:
	entry = []
	for token in arguments:
		if token.kind == ',':
			yield tuple(entry)
			entry = []
		else: entry.append(token)
	if entry: yield tuple(entry)

def read_configuration(attributes:Iterable[Attribute]) -> Configuration:
	"""
	Gather options from every helper attribute. Unknown options, repeated options,
	and anything not shaped like `key = "string"` are TemplateErrors.
	"""
	found = {}
	for attribute in attributes:
		if attribute.path != HELPER_ATTRIBUTE: continue
		if attribute.delimiter != '(':
			raise TemplateError('Expected #[%s(message = "...")].' % HELPER_ATTRIBUTE, span=attribute.span)
		for entry in _entries(attribute.arguments):
			if len(entry) != 3 or entry[0].kind != IDENT or entry[1].kind not in ('=', ':'):
				raise TemplateError('Expected an option of the form message = "...".', span=entry[0].span if entry else attribute.span)
			key, _, value = entry
			if key.text not in OPTIONS:
				raise TemplateError("Unknown option %r; the only option is 'message'." % key.text, span=key.span)
			if key.text in found:
				raise TemplateError("Option %r is given more than once." % key.text, span=key.span)
			found[key.text] = unquote(value), value.span
	if 'message' not in found: return Configuration()
	message, span = found['message']
	return Configuration(message, span)
