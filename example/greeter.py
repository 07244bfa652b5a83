"""========================================================================================================
This is a sample program to demonstrate calling the derive directly, the way a host compiler would,
one declaration at a time. It is not the only way: `py -m derivetools` handles a whole source file.

Type a declaration on a line by itself, such as:

	#[hello_macro(message = "Welcome aboard, {name}!")] struct Passenger;

and the generated implementation is printed, or else a description of what went wrong.
Type the word "quit" on a line by itself (or finish stdin -- ^Z on Dos, ^D on Unix) to end this program.
"""
from derivetools import derive
from derivetools.support.failureprone import Diagnostic, SourceText
from derivetools.support.pretty import layout

def greet(text:str) -> str:
	output = derive.expand(text)
	if isinstance(output, Diagnostic): return output.as_text(SourceText(text))
	return layout(output)

def main():
	print(__doc__)
	while True:
		try: text = input('> ')
		except EOFError: break
		if text.strip() == 'quit': break
		if text.strip(): print(greet(text))

if __name__ == '__main__': main()
