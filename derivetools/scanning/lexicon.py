""" Hook regular expression patterns up to actions on a scanner, and define the lexicon of declarations. """

import re
from typing import Callable, Optional
from .interface import INITIAL, IDENT, LIFETIME, LITERAL, Bindings, ScannerBlocked, TokenStream
from .engine import Rule, Scanner, IterableScanner

Action = Optional[Callable[[IterableScanner], None]]

class Definition(Bindings):
	"""
	A table of (pattern, action) rules. Rules apply in the INITIAL start condition
	unless they say otherwise; `condition(...)` makes a block of rules for some others.
	"""
	def __init__(self, name="Scanner Definition"):
		self.name = name
		self.__rules : list[Rule] = []
		self.__actions : list[Action] = []
		self.__unfinished = None

	def scan(self, text:str, *, start=INITIAL) -> IterableScanner:
		if self.__unfinished is not None: raise AssertionError('No action was given for the pattern %r.' % self.__unfinished)
		return IterableScanner(text, self.__rules, self, start=start)

	def rule(self, pattern:str, action:Action, *, rank=0, condition=None):
		""" An action of None means to skip over whatever the pattern matches. """
		if condition is None: conditions = frozenset([INITIAL])
		elif isinstance(condition, str): conditions = frozenset([condition])
		else: conditions = frozenset(condition)
		self.__rules.append(Rule(re.compile(pattern), rank, conditions))
		self.__actions.append(action)

	def on(self, pattern:str, *, rank=0, condition=None):
		"""
		Decorator form of `rule`:
			@RUST.on(r'/\\*')
			def comment(yy): yy.push('comment')
		"""
		if self.__unfinished is not None: raise AssertionError('No action was given for the pattern %r.' % self.__unfinished)
		self.__unfinished = pattern
		def decorator(action:Action):
			self.__unfinished = None
			self.rule(pattern, action, rank=rank, condition=condition)
			return action
		return decorator

	def token(self, kind:str, pattern:str, *, rank=0, condition=None):
		""" Whatever the pattern matches becomes a token of the given kind. """
		self.rule(pattern, lambda yy: yy.token(kind), rank=rank, condition=condition)

	def punctuation(self, *symbols:str, rank=0, condition=None):
		""" Each symbol is a token kind of its own. Longer symbols are tried first. """
		pattern = '|'.join(map(re.escape, sorted(symbols, key=len, reverse=True)))
		self.rule(pattern, lambda yy: yy.token(yy.match()), rank=rank, condition=condition)

	def ignore(self, pattern:str, *, rank=0, condition=None):
		self.rule(pattern, None, rank=rank, condition=condition)

	def condition(self, *names:str) -> "ConditionBlock": return ConditionBlock(self, names)

	def on_match(self, yy:Scanner, rule_id:int):
		action = self.__actions[rule_id]
		if action is not None: action(yy)

class ConditionBlock:
	""" `with definition.condition('comment') as comment:` adds rules for just those conditions. """
	def __init__(self, definition:Definition, names:tuple):
		self.definition, self.names = definition, names
	def __enter__(self): return self
	def __exit__(self, *exc_info): return False
	def on(self, pattern, *, rank=0): return self.definition.on(pattern, rank=rank, condition=self.names)
	def token(self, kind, pattern, *, rank=0): self.definition.token(kind, pattern, rank=rank, condition=self.names)
	def ignore(self, pattern, *, rank=0): self.definition.ignore(pattern, rank=rank, condition=self.names)

### The lexicon of Rust-flavoured declarations.
RUST = Definition("Rust declarations")
RUST.ignore(r'\s+')
RUST.ignore(r'//[^\n]*')

@RUST.on(r'/\*', condition=[INITIAL, 'comment'])
def _open_comment(yy:Scanner): yy.push('comment')

with RUST.condition('comment') as comment:
	comment.ignore(r'[^*/]+|[*/]')
	@comment.on(r'\*/')
	def _close_comment(yy:Scanner): yy.pop()

RUST.token(IDENT, r'(?:r#)?[^\W\d]\w*')
RUST.token(LIFETIME, r"'[^\W\d]\w*")
RUST.token(LITERAL, r"""b?'(?:[^'\\\n]|\\(?:[nrt\\0'"]|x[0-9a-fA-F]{2}|u\{[0-9a-fA-F_]{1,8}\}))'""", rank=1)
RUST.token(LITERAL, r'[bc]?"(?:[^"\\]|\\[\s\S])*"', rank=1)
RUST.token(LITERAL, r'(?:[bc]?r)(#*)"[\s\S]*?"\1', rank=1)
RUST.token(LITERAL, r'(?:0x[0-9a-fA-F_]+|0o[0-7_]+|0b[01_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?[\d_]+)?)(?:[a-zA-Z_]\w*)?')
RUST.punctuation(
	'::', '->', '=>', '==', '!=', '&&', '||', '..=', '...', '..',
	'+=', '-=', '*=', '/=', '%=', '^=', '&=', '|=',
	*'-+*/%^!&|=<>@.,;:#$?~(){}[]',
)


def tokenize(text:str) -> TokenStream:
	"""
	Scan a complete text into a TokenStream.
	Raises ScannerBlocked for characters nothing recognizes and for block comments left open.
	"""
	yy = RUST.scan(text)
	tokens = list(yy)
	if yy.condition != INITIAL: raise ScannerBlocked(len(text), yy.condition)
	return TokenStream(tokens)
