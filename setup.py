import setuptools

setuptools.setup(
	name='derive-tools',
	version='0.1.0.0',
	packages=[
		'derivetools',
		'derivetools.generation',
		'derivetools.parsing',
		'derivetools.scanning',
		'derivetools.support',
	],
	description='A HelloMacro derive: scan a type declaration, and generate the trait implementation for it',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	python_requires='>=3.9',
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Topic :: Software Development :: Code Generators",
		"Development Status :: 3 - Alpha",
    ],
	author="Ian Kjos",
	author_email="kjosib@gmail.com"
)
