"""
Expand every #[derive(HelloMacro)] in a Rust source file and write out the
generated implementations, one per derive site, in source order.

Problems are reported on STDERR with an excerpt of the source;
each one concerns only its own site, and the rest of the file is still expanded.
"""

import sys, os, argparse

from derivetools import driver
from derivetools.support.cfg import CfgContext
from derivetools.support.pretty import layout

def parse_arguments(argv=None):
	parser = argparse.ArgumentParser(prog='py -m derivetools', description=__doc__,)
	parser.add_argument('source_path', help='path to input file')
	parser.add_argument('-f', '--force', action='store_true', dest='force', help='allow to write over existing file')
	parser.add_argument('-o', '--output', help='path to output file (default: STDOUT)')
	parser.add_argument('--cfg', action='append', default=[], metavar='NAME[=VALUE]', help='set a configuration predicate, e.g. --cfg unix --cfg target_os=linux')
	parser.add_argument('--feature', action='append', default=[], help='enable a feature, as for #[cfg(feature = "...")]')
	parser.add_argument('--host', action='store_true', help='start from the predicates describing this machine (target_os, target_arch, ...)')
	parser.add_argument('-v', '--verbose', action='store_true', help="Squawk about each derive site as it is expanded.")
	return parser.parse_args(argv)

def make_cfg(args) -> CfgContext:
	base = CfgContext.for_host(features=()) if args.host else CfgContext()
	flags = set(base.flags)
	values = {key: set(v) for key, v in base.values.items()}
	for setting in args.cfg:
		name, equals, value = setting.partition('=')
		if equals: values.setdefault(name, set()).add(value.strip('"'))
		else: flags.add(name)
	values.setdefault('feature', set()).update(args.feature)
	return CfgContext(flags, values)

def main(args):
	if args.verbose: driver.VERBOSE = True
	if args.output and os.path.exists(args.output) and not args.force:
		print('Target file already exists and --force command-line argument was not given.', file=sys.stderr)
		return 1
	with open(args.source_path, encoding='utf-8') as fh: document = fh.read()
	build = driver.expand_source(document, filename=os.path.basename(args.source_path), cfg=make_cfg(args))
	build.report()
	generated = '\n\n'.join(layout(tokens) for tokens in build.outputs())
	if args.output:
		with open(args.output, 'w', encoding='utf-8') as fh: fh.write(generated + '\n')
		print('Wrote %d implementation(s) to:' % len(build.outputs()), file=sys.stderr)
		print('\t' + args.output, file=sys.stderr)
	elif generated:
		print(generated)
	return 0 if build.ok else 1

if __name__ == '__main__': sys.exit(main(parse_arguments()))
