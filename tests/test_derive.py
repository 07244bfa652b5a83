import unittest
from derivetools import derive
from derivetools.derive import Stage, expand, run
from derivetools.scanning.interface import TokenStream, LITERAL
from derivetools.scanning.lexicon import tokenize
from derivetools.generation.template import Configuration, unquote
from derivetools.support.failureprone import Diagnostic, Site

def greeting(tokens:TokenStream) -> str:
	""" What the generated method prints: the last string literal in the implementation. """
	return unquote([t for t in tokens if t.kind == LITERAL][-1])

class TestExpansion(unittest.TestCase):
	def test_00_name_fidelity(self):
		output = expand(tokenize('struct Cat;'))
		self.assertIsInstance(output, TokenStream)
		self.assertEqual("Hello, Macro! I'm a Cat!", greeting(output))
		self.assertTrue(str(output).startswith('impl HelloMacro for Cat {'))

	def test_01_text_is_scanned_first(self):
		self.assertEqual(expand(tokenize('enum Mood { Happy }')), expand('enum Mood { Happy }'))

	def test_02_generic_preservation(self):
		text = str(expand('pub struct Wrapper<T: Clone>(T);'))
		header = text[:text.index('{')]
		self.assertEqual('impl<T: Clone> HelloMacro for Wrapper<T> ', header)

	def test_03_attribute_override(self):
		self.assertEqual('欢迎 User', greeting(expand('#[derive(HelloMacro)]\n#[hello_macro(message: "欢迎 {name}")]\nstruct User;')))
		self.assertEqual('欢迎 User', greeting(expand('struct User;', Configuration('欢迎 {name}'))))

	def test_04_explicit_configuration_wins(self):
		output = expand('#[hello_macro(message = "From the attribute")] struct Cat;', Configuration('From the caller, {name}'))
		self.assertEqual('From the caller, Cat', greeting(output))

	def test_05_determinism(self):
		for source in ['struct Cat;', "struct Holder<'a, T: 'a + ?Sized>(&'a T);", 'fn main() {}', '#[hello_macro(message = "{x}")] struct Cat;']:
			with self.subTest(source=source):
				self.assertEqual(run(tokenize(source)), run(tokenize(source)))
				self.assertEqual(str(expand(source)), str(expand(source)))

	def test_06_stages(self):
		expansion = run('union Bits { i: u32, f: f32 }')
		self.assertTrue(expansion.ok)
		self.assertEqual(Stage.COMPLETED, expansion.stage)
		self.assertIsNone(expansion.failed_after)


class TestFailures(unittest.TestCase):
	def test_00_rejection(self):
		output = expand('fn main() {}')
		self.assertIsInstance(output, Diagnostic)
		self.assertEqual('parsing', output.phase)
		self.assertEqual((0, 2), output.span)
		self.assertIn("'fn'", output.description)

	def test_01_failure_records_where_it_stopped(self):
		expansion = run('struct A; struct B;')
		self.assertFalse(expansion.ok)
		self.assertEqual(Stage.FAILED, expansion.stage)
		self.assertEqual(Stage.RECEIVED, expansion.failed_after)
		expansion = run('#[hello_macro(message = "{nope}")] struct Cat;')
		self.assertEqual(Stage.EXTRACTED, expansion.failed_after)
		self.assertEqual('generating', expansion.output.phase)
		self.assertEqual((24, 32), expansion.output.span)

	def test_02_bad_configuration(self):
		for source in ['#[hello_macro(colour = "red")] struct Cat;', '#[hello_macro(message = 7)] struct Cat;']:
			with self.subTest(source=source):
				diagnostic = expand(source)
				self.assertIsInstance(diagnostic, Diagnostic)
				self.assertEqual('generating', diagnostic.phase)
		diagnostic = expand('struct Cat;', Configuration('{}', (40, 44)))
		self.assertEqual((40, 44), diagnostic.span)
		diagnostic = expand('struct Cat;', Configuration('\ud800 {name}'))
		self.assertIsInstance(diagnostic, Diagnostic)
		self.assertEqual('generating', diagnostic.phase)

	def test_03_scanning(self):
		diagnostic = expand('struct Cat `')
		self.assertEqual('scanning', diagnostic.phase)
		self.assertEqual((11, 12), diagnostic.span)
		self.assertEqual('scanning', expand('struct /* Cat;').phase)

	def test_04_site_is_carried(self):
		site = Site('zoo.rs', (100, 112))
		diagnostic = expand('fn main() {}', site=site)
		self.assertEqual(site, diagnostic.site)
		self.assertEqual(Site(), expand('').site)

	def test_05_nothing_escapes(self):
		expansion = run(42)
		self.assertEqual(Stage.FAILED, expansion.stage)
		self.assertTrue(expansion.output.description.startswith('Internal error: TypeError'))

	def test_06_isolation(self):
		outcomes = [expand(source) for source in ['struct Good;', 'struct Bad<', 'enum AlsoGood { A }']]
		self.assertEqual([TokenStream, Diagnostic, TokenStream], [type(o) for o in outcomes])
		self.assertEqual("Hello, Macro! I'm a AlsoGood!", greeting(outcomes[2]))

	def test_07_no_shared_state(self):
		self.assertIsInstance(expand('struct Bad<'), Diagnostic)
		self.assertEqual(expand('struct Cat;'), derive.expand('struct Cat;'))


if __name__ == '__main__':
	unittest.main()
