import unittest
from derivetools.scanning.interface import TokenStream, render, ident, literal
from derivetools.scanning.lexicon import tokenize
from derivetools.parsing.declaration import parse
from derivetools.generation.extractor import extract
from derivetools.generation.template import (
	DEFAULT_MESSAGE, Configuration, TemplateError, render_message, quote, unquote, read_configuration,
)
from derivetools.generation.builder import TRAIT_NAME, METHOD_NAME, build, generate
from derivetools.support.pretty import layout

def signature_of(source): return extract(parse(tokenize(source)))

def generated(source, config=None):
	signature = signature_of(source)
	return str(generate(signature.name, signature.generics, config))

class TestExtractor(unittest.TestCase):
	def test_00_no_generics(self):
		signature = signature_of('enum Mood { Happy, Grumpy }')
		self.assertEqual('Mood', signature.name.text)
		self.assertEqual([], signature.generics.bound_tokens())
		self.assertEqual([], signature.generics.bare_tokens())

	def test_01_bound_and_bare(self):
		signature = signature_of("struct Holder<'a, 'b: 'a, T: Iterator<Item = u8> + ?Sized, const N: usize = 4>(&'a T, [u8; N]);")
		self.assertEqual("<'a, 'b: 'a, T: Iterator<Item = u8> + ?Sized, const N: usize>", render(signature.generics.bound_tokens()))
		self.assertEqual("<'a, 'b, T, N>", render(signature.generics.bare_tokens()))

	def test_02_defaults_are_dropped(self):
		signature = signature_of('struct Map<K, V = String> { k: K, v: V }')
		self.assertEqual('<K, V>', render(signature.generics.bound_tokens()))

	def test_03_where_clause_passes_through(self):
		signature = signature_of('struct W<T> where T: Copy, { t: T }')
		self.assertEqual('T: Copy,', render(signature.generics.where_clause))


class TestTemplate(unittest.TestCase):
	def test_00_default(self):
		self.assertEqual("Hello, Macro! I'm a Cat!", render_message(DEFAULT_MESSAGE, 'Cat'))
		self.assertEqual(DEFAULT_MESSAGE, Configuration().template())

	def test_01_placeholders(self):
		self.assertEqual('Welcome, User', render_message('Welcome, {name}', 'User'))
		self.assertEqual('{literal} braces for Cat', render_message('{{literal}} braces for {name}', 'Cat'))
		self.assertEqual('no placeholder', render_message('no placeholder', 'Cat'))

	def test_02_bad_templates(self):
		for template in ['{nome}', '{}', '{0}', '{name!r}', '{name:>9}', '{name.upper}', 'open {', 'close }']:
			with self.subTest(template=template):
				with self.assertRaises(TemplateError):
					render_message(template, 'Cat', span=(3, 4))
		with self.assertRaises(TemplateError) as context:
			render_message(42, 'Cat', span=(3, 4))
		self.assertEqual((3, 4), context.exception.span)

	def test_03_lone_surrogates(self):
		for template in ['\ud800 {name}', '{name} \udfff']:
			with self.subTest(template=template):
				with self.assertRaises(TemplateError) as context:
					render_message(template, 'Cat', span=(3, 4))
				self.assertEqual((3, 4), context.exception.span)
		self.assertEqual('\U0001F431 Cat', render_message('\U0001F431 {name}', 'Cat'))

	def test_04_quote(self):
		self.assertEqual('"plain"', quote('plain'))
		self.assertEqual(r'"say \"hi\"\n"', quote('say "hi"\n'))
		self.assertEqual(r'"back\\slash"', quote('back\\slash'))
		self.assertEqual(r'"\u{7}"', quote('\x07'))
		self.assertEqual('"I\'m"', quote("I'm"))

	def test_05_unquote(self):
		self.assertEqual('a"b\nHA', unquote(literal(r'"a\"b\n\u{48}\x41"')))
		self.assertEqual('he said "hi"', unquote(literal('r#"he said "hi""#')))
		self.assertEqual('ab', unquote(literal('"a\\\n    b"')))
		for bogus in [literal('b"bytes"'), literal('42'), ident('message'), literal(r'"\q"'), literal(r'"\u{D800}"')]:
			with self.subTest(token=bogus):
				with self.assertRaises(TemplateError):
					unquote(bogus)

	def test_06_round_trip_through_the_scanner(self):
		text = 'tab\there, "quoted", back\\slash'
		[token] = tokenize(quote(text))
		self.assertEqual(text, unquote(token))


class TestConfiguration(unittest.TestCase):
	def configure(self, source):
		return read_configuration(parse(tokenize(source)).attributes)

	def test_00_absent(self):
		self.assertEqual(Configuration(), self.configure('#[derive(HelloMacro)] struct Cat;'))

	def test_01_message(self):
		config = self.configure('#[derive(HelloMacro)]\n#[hello_macro(message = "Welcome, {name}")]\nstruct User;')
		self.assertEqual('Welcome, {name}', config.message)
		self.assertEqual((46, 63), config.span)
		self.assertEqual('Hi', self.configure('#[hello_macro(message: "Hi",)] struct Cat;').message)
		self.assertEqual('Hi', self.configure('#[hello_macro(message = r"Hi")] struct Cat;').message)

	def test_02_mistakes(self):
		for source in [
			'#[hello_macro(greeting = "x")] struct Cat;',
			'#[hello_macro(message = "x")] #[hello_macro(message = "y")] struct Cat;',
			'#[hello_macro = "x"] struct Cat;',
			'#[hello_macro] struct Cat;',
			'#[hello_macro(message)] struct Cat;',
			'#[hello_macro(message = 5)] struct Cat;',
			'#[hello_macro(message = "x" "y")] struct Cat;',
			'#[hello_macro(message = "x",, )] struct Cat;',
		]:
			with self.subTest(source=source):
				with self.assertRaises(TemplateError) as context:
					self.configure(source)
				self.assertIsNotNone(context.exception.span)


class TestBuilder(unittest.TestCase):
	def test_00_unit_struct(self):
		self.assertEqual(
			'impl HelloMacro for Cat { fn hello_macro() { println!("{}", "Hello, Macro! I\'m a Cat!"); } }',
			generated('struct Cat;'),
		)

	def test_01_generics(self):
		self.assertEqual(
			'impl<T: Clone> HelloMacro for Wrapper<T> { fn hello_macro() { println!("{}", "Hello, Macro! I\'m a Wrapper!"); } }',
			generated('pub struct Wrapper<T: Clone>(T);'),
		)
		self.assertTrue(generated('struct W<T> where T: Copy { t: T }').startswith('impl<T> HelloMacro for W<T> where T: Copy {'))

	def test_02_custom_message(self):
		self.assertIn('"Welcome, User"', generated('struct User;', Configuration('Welcome, {name}')))
		self.assertIn(r'"say \"Cat\""', generated('struct Cat;', Configuration('say "{name}"')))

	def test_03_bad_message(self):
		with self.assertRaises(TemplateError):
			generated('struct Cat;', Configuration('{oops}', (5, 11)))

	def test_04_structure(self):
		signature = signature_of('struct Cat;')
		item = build(signature.name, signature.generics)
		self.assertEqual(TRAIT_NAME, item.trait)
		self.assertEqual(METHOD_NAME, item.method)
		self.assertEqual("Hello, Macro! I'm a Cat!", item.message)
		tokens = item.to_tokens()
		self.assertIsInstance(tokens, TokenStream)
		depth = 0
		for token in tokens:
			if token.kind in '([{': depth += 1
			elif token.kind in ')]}': depth -= 1
			self.assertGreaterEqual(depth, 0)
		self.assertEqual(0, depth)

	def test_05_generated_text_scans_back(self):
		signature = signature_of("struct Holder<'a, T: Iterator<Item = u8> + ?Sized, const N: usize>(&'a T, [u8; N]);")
		tokens = generate(signature.name, signature.generics, Configuration('{name} says "hi"'))
		self.assertEqual(tokens, tokenize(str(tokens)))

	def test_06_layout(self):
		self.assertEqual(
			'impl HelloMacro for Cat {\n'
			'    fn hello_macro() {\n'
			'        println!("{}", "Hello, Macro! I\'m a Cat!");\n'
			'    }\n'
			'}',
			layout(tokenize(generated('struct Cat;'))),
		)


if __name__ == '__main__':
	unittest.main()
