"""
Expand the macros in a source file and print the result.

The file may define macros with `macro_rules! name { (pattern) => { template } ; ... }`
items at top level. Everything else in the file is expanded against those definitions.
"""

import sys, argparse

from treemacro import driver
from treemacro.interface import MacroError, ExpansionError
from treemacro.reader import tokenize, collect_definitions, LexicalError
from treemacro.table import DefinitionTable
from treemacro.trees import build_forest, flatten, render
from treemacro.support.failureprone import SourceText

DEFAULTS = driver.ExpansionConfig()

def parse_arguments():
	parser = argparse.ArgumentParser(prog='py -m treemacro', description=__doc__,)
	parser.add_argument('source_path', help='path to input file')
	parser.add_argument('--depth', type=int, default=DEFAULTS.max_expansion_depth, help='maximum expansion depth (default %(default)s)')
	parser.add_argument('--max-tokens', type=int, default=DEFAULTS.max_total_output_tokens, help='ceiling on tokens produced by expansion (default %(default)s)')
	parser.add_argument('--max-repetitions', type=int, default=DEFAULTS.max_repetition_count, help='ceiling on matches of any one repetition (default %(default)s)')
	parser.add_argument('--no-marker', action='store_true', help="invocations are `name(...)` rather than `name!(...)`")
	parser.add_argument('-k', '--keep-going', action='store_true', help='report failed invocations, drop them, and expand the rest')
	parser.add_argument('-v', '--verbose', action='store_true', help='show the hygiene context of each expanded identifier, and squawk about each expansion')
	return parser.parse_args()

def main(args):
	if args.verbose: driver.VERBOSE = True
	with open(args.source_path) as fh: document = fh.read()
	source = SourceText(document, filename=args.source_path)
	config = driver.ExpansionConfig(
		max_expansion_depth=args.depth,
		max_total_output_tokens=args.max_tokens,
		max_repetition_count=args.max_repetitions,
		marker=None if args.no_marker else '!',
	)
	try: config.validate()
	except ValueError as e:
		print(str(e), file=sys.stderr)
		exit(2)
	listener = driver.CollectingListener() if args.keep_going else None
	try:
		table = DefinitionTable()
		forest = collect_definitions(build_forest(tokenize(document)), table)
		expanded = driver.Expander(table, config, listener).expand_forest(forest)
	except LexicalError as e:
		source.complain(slice(e.position, e.position+1), "cannot make sense of this text")
		exit(1)
	except ExpansionError as e:
		e.as_issue().emit(lambda key: source)
		exit(1)
	except MacroError as e:
		span = getattr(e, 'span', None)
		if span is None: print(str(e), file=sys.stderr)
		else: source.complain(span.slice(), str(e))
		exit(1)
	if listener is not None:
		for error in listener.errors: error.as_issue().emit(lambda key: source)
	print(render(flatten(expanded), show_context=args.verbose))
	if listener is not None and listener.errors: exit(1)

if __name__ == '__main__': main(parse_arguments())
