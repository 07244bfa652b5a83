"""
Project a parsed declaration onto what an implementation header needs:

	impl<BOUND> Trait for Name<BARE> where ...

The bound form keeps every constraint (so the header is valid for constrained
parameters) but drops defaults, which an impl header may not carry.
The bare form is just the parameter names.
"""
from typing import NamedTuple
from ..scanning.interface import Token, ident, punct
from ..parsing.declaration import Declaration, GenericParam, ParamKind

class GenericParameterList(NamedTuple):
	bound: tuple[tuple[Token, ...], ...]
	bare: tuple[tuple[Token, ...], ...]
	where_clause: tuple[Token, ...] = ()

	def bound_tokens(self) -> list[Token]: return _angled(self.bound)
	def bare_tokens(self) -> list[Token]: return _angled(self.bare)

class Signature(NamedTuple):
	name: Token
	generics: GenericParameterList

def _angled(params) -> list[Token]:
	""" Comma-separated inside angle brackets; nothing at all if there are no parameters. """
	if not params: return []
	tokens = [punct('<')]
	for i, param in enumerate(params):
		if i: tokens.append(punct(','))
		tokens.extend(param)
	tokens.append(punct('>'))
	return tokens

def bound_form(param:GenericParam) -> tuple[Token, ...]:
	if param.kind is ParamKind.CONST: return (ident('const'), param.name, punct(':')) + param.bounds
	if param.bounds: return (param.name, punct(':')) + param.bounds
	return (param.name,)

def extract(node:Declaration) -> Signature:
	generics = GenericParameterList(
		bound=tuple(bound_form(p) for p in node.generics),
		bare=tuple((p.name,) for p in node.generics),
		where_clause=node.where_clause,
	)
	return Signature(node.name, generics)
