"""
The scanning clockwork: find the next lexeme, decide which rule it belongs to,
and let the bindings decide what (if anything) that means.
"""
import re
from typing import NamedTuple, Optional, Sequence
from .interface import INITIAL, Bindings, Token

class Rule(NamedTuple):
	pattern: re.Pattern
	rank: int
	conditions: frozenset

def scan_one_raw_lexeme(rules:Sequence[Rule], text:str, cursor:int, condition:str) -> tuple[int, Optional[int]]:
	"""
	Given a start-condition, find the end of the lexeme to be matched and the rule number
	(if any) that applies to the match. The longest match wins; among equally-long matches
	the higher rank wins, and after that the earlier rule. Zero-width matches do not count,
	so a `None` rule_id means the scanner is stuck at `cursor`.
	"""
	right, rule_id, best_rank = cursor, None, None
	for candidate, rule in enumerate(rules):
		if condition not in rule.conditions: continue
		found = rule.pattern.match(text, cursor)
		if found is None: continue
		end = found.end()
		if end > right or (end == right and rule_id is not None and rule.rank > best_rank):
			right, rule_id, best_rank = end, candidate, rule.rank
	return right, rule_id

class Scanner:
	"""
	Walks a text one lexeme at a time against a table of rules.
	Scan actions see `left`, `right`, `condition`, and `match()`;
	they may change the start condition, or push and pop a stack of them.
	"""

	condition : str

	def __init__(self, text:str, rules:Sequence[Rule], bindings:Bindings, start=INITIAL):
		self.__text, self.__rules, self.__bindings = text, rules, bindings
		self.__saved_conditions = []
		self.condition = start
		self.left = self.right = 0

	def has_more(self) -> bool:
		return self.right < len(self.__text)

	def step(self):
		""" Scan one lexeme and dispatch it, or complain about being stuck. """
		self.left = self.right
		self.right, rule_id = scan_one_raw_lexeme(self.__rules, self.__text, self.left, self.condition)
		if rule_id is not None: self.__bindings.on_match(self, rule_id)
		else:
			self.right = self.left + 1
			self.__bindings.on_stuck(self)

	def enter(self, condition): self.condition = condition

	def push(self, condition):
		""" Remember the current start condition, then switch to another. """
		self.__saved_conditions.append(self.condition)
		self.condition = condition

	def pop(self):
		""" Go back to the start condition most recently pushed. """
		self.condition = self.__saved_conditions.pop()

	def match(self) -> str:
		return self.__text[self.left:self.right]

class IterableScanner(Scanner):
	"""
	Iterating over the scanner yields tokens.
	Scan actions call yy.token(...); the tokens are handed out once the action returns.
	"""

	def __init__(self, text:str, rules:Sequence[Rule], bindings:Bindings, start=INITIAL):
		super().__init__(text, rules, bindings, start)
		self.__pending = []

	def __iter__(self):
		while self.has_more():
			self.step()
			yield from self.__pending
			self.__pending.clear()

	def token(self, kind:str, text:str=None):
		"""
		Emit a token spanning the current match.
		The text defaults to the matched text; punctuation passes its own text as the kind.
		"""
		assert kind is not None
		self.__pending.append(Token(kind, self.match() if text is None else text, (self.left, self.right)))
