"""
The host adapter: the one entry point a host calls at each `#[derive(HelloMacro)]` site.

	expand(tokens, config=None, *, site=None) -> TokenStream | Diagnostic

It runs the stages in a strict line -- scan (if given text), parse, extract, generate --
and converts every failure into a Diagnostic scoped to the site. No exception escapes:
one bad declaration must never take the rest of a build down with it.
"""
from enum import Enum
from typing import NamedTuple, Optional, Union
from .scanning.interface import TokenStream, ScannerBlocked
from .scanning.lexicon import tokenize
from .parsing.interface import ParseError
from .parsing.declaration import parse
from .generation.extractor import extract
from .generation.template import Configuration, TemplateError, read_configuration
from .generation.builder import generate
from .support.failureprone import Diagnostic, Site

class Stage(Enum):
	RECEIVED = 'received'
	PARSED = 'parsed'
	EXTRACTED = 'extracted'
	GENERATED = 'generated'
	COMPLETED = 'completed'
	FAILED = 'failed'

# Which phase to blame when a given stage is the last one reached.
_PHASE = {
	Stage.RECEIVED: 'parsing',
	Stage.PARSED: 'extracting',
	Stage.EXTRACTED: 'generating',
	Stage.GENERATED: 'expanding',
}

class Expansion(NamedTuple):
	""" The full story of one expansion: how far it got, and what came of it. """
	stage: Stage
	output: Union[TokenStream, Diagnostic]
	failed_after: Optional[Stage] = None

	@property
	def ok(self) -> bool: return self.stage is Stage.COMPLETED


def run(raw:Union[TokenStream, str], config:Optional[Configuration]=None, *, site:Site=None) -> Expansion:
	site = site or Site()
	if isinstance(raw, str):
		try: raw = tokenize(raw)
		except ScannerBlocked as ex:
			return Expansion(Stage.FAILED, Diagnostic('scanning', "Unrecognized text (in %s mode)." % ex.condition, site, (ex.position, ex.position + 1)), Stage.RECEIVED)
	stage = Stage.RECEIVED
	try:
		node = parse(raw)
		stage = Stage.PARSED
		signature = extract(node)
		stage = Stage.EXTRACTED
		if config is None: config = read_configuration(node.attributes)
		output = generate(signature.name, signature.generics, config)
		stage = Stage.GENERATED
	except (ParseError, TemplateError) as ex:
		return Expansion(Stage.FAILED, Diagnostic(_PHASE[stage], ex.message, site, ex.span), stage)
	except Exception as ex:
		description = "Internal error: %s: %s" % (type(ex).__name__, ex)
		return Expansion(Stage.FAILED, Diagnostic(_PHASE[stage], description, site), stage)
	return Expansion(Stage.COMPLETED, output)

def expand(raw:Union[TokenStream, str], config:Optional[Configuration]=None, *, site:Site=None) -> Union[TokenStream, Diagnostic]:
	"""
	Derive `HelloMacro` for the one declaration in `raw`.
	An explicit `config` takes precedence over any #[hello_macro(...)] helper attribute.
	Returns the generated implementation, or a Diagnostic explaining why there is none.
	"""
	return run(raw, config, site=site).output
