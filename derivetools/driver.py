"""
A stand-in for the host compiler: expand every `#[derive(HelloMacro)]` in a source text.

The text is scanned once and cut into top-level items. Conditional compilation is applied
item by item (`cfg_attr` first, then `cfg`), derive sites are found, and each site goes
through `derive.run` on its own. A failure is recorded against its own site and the
build carries on with the next item.
"""
import sys
from typing import NamedTuple, Optional
from .scanning.interface import Token, TokenStream, ScannerBlocked, IDENT
from .scanning.lexicon import tokenize
from .parsing.interface import ParseError, UnexpectedTokenError, UnexpectedEndOfTextError
from .parsing.declaration import Attribute, Cursor, OPENERS, CLOSERS, make_attribute, outer_attributes, split_commas
from .generation.template import HELPER_ATTRIBUTE, TemplateError, read_configuration
from .generation.builder import TRAIT_NAME
from .support.failureprone import SourceText, Site, Diagnostic, Severity
from .support.cfg import CfgContext
from .derive import Expansion, Stage, run

VERBOSE = False

def split_items(tokens:TokenStream) -> list[TokenStream]:
	"""
	An item ends with a `;` or a `{...}` group at depth zero (plus a `;` right after the group).
	Outer attributes stay with the item they precede. An inner attribute `#![...]` is an item by itself.
	An attribute turning up after an item has begun means that item never got its `;`:
	it is cut short there, and `unfinished` will say so.
	"""
	cursor, items = Cursor(tokens), []
	while not cursor.at_end():
		start = cursor.at
		if cursor.peek().kind == '#' and cursor.peek(1) is not None and cursor.peek(1).kind == '!':
			cursor.at += 2
			cursor.group()
		else:
			begun = False
			while True:
				token = cursor.peek()
				if token is None: raise UnexpectedEndOfTextError("';' or '}' to finish the item", span=cursor.end_span())
				if token.kind == '#':
					if begun: break
					cursor.at += 1
					if cursor.peek() is not None and cursor.peek().kind == '[': cursor.group()
					continue
				begun = True
				if token.kind == ';':
					cursor.at += 1
					break
				if token.kind == '{':
					cursor.group()
					cursor.accept(';')
					break
				if token.kind in OPENERS: cursor.group()
				elif token.kind in CLOSERS: raise UnexpectedTokenError(token, "an item")
				else: cursor.at += 1
		items.append(tokens[start:cursor.at])
	return items

def is_inner_attribute(item:TokenStream) -> bool:
	return item[0].kind == '#' and len(item) > 1 and item[1].kind == '!'

def unfinished(item:TokenStream) -> Optional[Token]:
	""" The last token of an item cut short by `split_items`, or None if the item is complete. """
	if is_inner_attribute(item) or item[-1].kind in (';', '}'): return None
	return item[-1]

def effective_attributes(item:TokenStream, cfg:CfgContext) -> list[Attribute]:
	"""
	The item's outer attributes, with every `cfg_attr(predicate, attr, ...)` resolved:
	the listed attributes stand in its place when the predicate holds, and vanish when it doesn't.
	"""
	pending = outer_attributes(Cursor(item))
	pending.reverse()
	found = []
	while pending:
		attribute = pending.pop()
		if attribute.path != 'cfg_attr':
			found.append(attribute)
			continue
		parts = split_commas(attribute.arguments) if attribute.delimiter == '(' else []
		if len(parts) < 2 or not parts[0]:
			raise ParseError("Expected #[cfg_attr(predicate, attribute, ...)].", span=attribute.span)
		if not cfg.evaluate(parts[0]): continue
		for body in reversed(parts[1:]):
			unpacked = make_attribute(Token('#', '#'), (Token('[', '['),) + body + (Token(']', ']'),))
			pending.append(unpacked._replace(span=attribute.span))
	return found

def included(attributes:list[Attribute], cfg:CfgContext) -> bool:
	""" Is the item compiled in? Every `cfg` attribute must agree. """
	for attribute in attributes:
		if attribute.path != 'cfg': continue
		if attribute.delimiter != '(': raise ParseError("Expected #[cfg(predicate)].", span=attribute.span)
		if not cfg.evaluate(attribute.arguments): return False
	return True

def derives(attributes:list[Attribute], trait:str=TRAIT_NAME) -> bool:
	""" Does some `derive(...)` list name the trait, either bare or as the end of a path? """
	for attribute in attributes:
		if attribute.path != 'derive' or attribute.delimiter != '(': continue
		for part in split_commas(attribute.arguments):
			if part and part[-1].text == trait and all(t.kind in (IDENT, '::') for t in part): return True
	return False


class Derivation(NamedTuple):
	site: Site
	expansion: Expansion

class Build:
	""" Everything that came of expanding one source text. """

	def __init__(self, source:SourceText):
		self.source = source
		self.derivations : list[Derivation] = []
		self.problems : list[Diagnostic] = [] # Those not tied to any derive site.
		self.configured_out = 0
		self.remarks : list[Diagnostic] = [] # Warnings and notices; they never spoil a build.

	def outputs(self) -> list[TokenStream]:
		return [d.expansion.output for d in self.derivations if d.expansion.ok]

	def diagnostics(self) -> list[Diagnostic]:
		return self.problems + [d.expansion.output for d in self.derivations if not d.expansion.ok]

	@property
	def ok(self) -> bool: return not self.diagnostics()

	def report(self):
		"""
		Print every error, with an excerpt of the source, to standard error.
		Warnings follow; notices only in verbose mode.
		"""
		for diagnostic in self.diagnostics(): diagnostic.emit(self.source)
		for remark in self.remarks:
			if VERBOSE or remark.severity is not Severity.NOTICE: remark.emit(self.source)


def expand_source(text:str, *, filename:str=None, cfg:Optional[CfgContext]=None) -> Build:
	"""
	Expand every derive site in `text`. Without a `cfg` context, no configuration predicate is set,
	so the outcome depends on nothing but the text.
	"""
	cfg = cfg or CfgContext()
	build = Build(SourceText(text, filename=filename))
	try: tokens = tokenize(text)
	except ScannerBlocked as ex:
		build.problems.append(Diagnostic('scanning', "Unrecognized text (in %s mode)." % ex.condition, Site(filename), (ex.position, ex.position + 1)))
		return build
	try: items = split_items(tokens)
	except ParseError as ex:
		build.problems.append(Diagnostic('parsing', ex.message, Site(filename), ex.span))
		return build
	for item in items:
		if is_inner_attribute(item): continue
		site = Site(filename, item.span())
		loose_end = unfinished(item)
		if loose_end is not None:
			build.problems.append(Diagnostic('parsing', "Expected ';' to finish the item before the next attribute.", site, loose_end.span))
			continue
		try:
			attributes = effective_attributes(item, cfg)
			if not included(attributes, cfg):
				build.configured_out += 1
				build.remarks.append(Diagnostic('configuring', "Left out: its cfg predicate does not hold.", site, severity=Severity.NOTICE))
				continue
		except ParseError as ex:
			build.problems.append(Diagnostic('parsing', ex.message, site, ex.span))
			continue
		if not derives(attributes):
			for attribute in attributes:
				if attribute.path == HELPER_ATTRIBUTE:
					build.remarks.append(Diagnostic('configuring', "#[%s] has no effect without #[derive(%s)]." % (HELPER_ATTRIBUTE, TRAIT_NAME), site, attribute.span, Severity.WARNING))
			continue
		try: config = read_configuration(attributes)
		except TemplateError as ex:
			expansion = Expansion(Stage.FAILED, Diagnostic('generating', ex.message, site, ex.span), Stage.RECEIVED)
		else:
			expansion = run(item, config, site=site)
		if VERBOSE: print("%s: %s" % (site, expansion.stage.value), file=sys.stderr)
		build.derivations.append(Derivation(site, expansion))
	return build
