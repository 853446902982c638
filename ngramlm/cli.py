"""
Language Model Tester

Train a language model, then measure its perplexity on the gold sentences
of a set of speech N-best lists and the word error rate of rescoring them.

Usage:
    ngramlm --path data --model bigram
    ngramlm --path data --model katz-bigram-pp --verbose
    ngramlm --path data --model sri --sri data/lm.arpa
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler

from .corpus import SentenceCollection, load_brown_corpus
from .errors import ConfigurationError
from .evaluation import ACOUSTIC_SCALE
from .factory import ModelKind, check_model_config
from .nbest import read_nbest_lists
from .training import console, evaluate_model_cli, show_generated_sentences, train_model_cli


logger = logging.getLogger(__name__)

TRAINING_SENTENCES_FILE = "treebank-sentences-spoken-train.txt"
SPEECH_NBEST_LISTS_DIR = "wsj_n_bst"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ngramlm",
        description="Evaluate an n-gram language model on speech N-best lists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Available models:
  baseline       - Unigram model
  bigram         - Interpolated bigram (lambda=0.6)
  trigram        - Interpolated trigram (lambda1=0.5, lambda2=0.3)
  katz-bigram    - Katz backoff with a fixed discount (beta=0.1)
  katz-bigram-pp - Katz backoff with Good-Turing discounting (cutoff=5)
  sri            - Pre-trained ARPA file given with --sri
        """
    )

    parser.add_argument('--path', default='.',
                        help='Base directory of the data (default: .)')
    parser.add_argument('--train-file', default=None,
                        help=f'Training sentences (default: PATH/{TRAINING_SENTENCES_FILE})')
    parser.add_argument('--nbest-dir', default=None,
                        help=f'Directory of N-best lists (default: PATH/{SPEECH_NBEST_LISTS_DIR})')
    parser.add_argument('--brown', nargs='*', metavar='CATEGORY', default=None,
                        help='Train on the Brown corpus (optionally only these categories)')
    parser.add_argument('-m', '--model', default='baseline',
                        help='Model descriptor (default: baseline)')
    parser.add_argument('--sri', default=None,
                        help='ARPA file for the sri model')

    parser.add_argument('--lambda', dest='lambda_', type=float, default=None,
                        help='Bigram interpolation weight')
    parser.add_argument('--lambda1', type=float, default=None,
                        help='Trigram interpolation weight')
    parser.add_argument('--lambda2', type=float, default=None,
                        help='Bigram weight inside the trigram model')
    parser.add_argument('--beta', type=float, default=None,
                        help='Katz discount')
    parser.add_argument('--cutoff', type=int, default=None,
                        help='Good-Turing cutoff')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for sentence generation')

    parser.add_argument('--acoustic-scale', type=float, default=ACOUSTIC_SCALE,
                        help=f'Divisor for acoustic scores (default: {ACOUSTIC_SCALE:g})')
    parser.add_argument('--generate', type=int, default=0, metavar='N',
                        help='Print N generated sentences')
    parser.add_argument('--max-length', type=int, default=30,
                        help='Length cap for generated sentences (default: 30)')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print the selected and gold hypothesis of every list')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Turn off --verbose')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING, INFO with --verbose)')

    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True
    )


def model_params(args: argparse.Namespace, kind: ModelKind) -> dict:
    """Collect the hyperparameters given on the command line."""
    accepted = {
        ModelKind.BIGRAM: ('lambda_',),
        ModelKind.TRIGRAM: ('lambda1', 'lambda2'),
        ModelKind.KATZ_BIGRAM: ('beta',),
        ModelKind.KATZ_BIGRAM_PP: ('cutoff',),
    }.get(kind, ())

    params = {}
    for name in accepted:
        value = getattr(args, name)
        if value is not None:
            params[name] = value
    if args.seed is not None:
        params['seed'] = args.seed
    return params


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    verbose = args.verbose and not args.quiet
    configure_logging(args.log_level or ('INFO' if verbose else 'WARNING'))

    base_path = Path(args.path)
    console.print(f"Using base path: {base_path}")
    console.print(f"Using model: {args.model}")

    try:
        kind = check_model_config(args.model, args.sri)

        sentences = None
        corpus_label = ""
        if kind != ModelKind.SRI:
            if args.brown is not None:
                sentences, corpus_stats = load_brown_corpus(categories=args.brown or None)
                corpus_label = f"Brown corpus ({corpus_stats['num_sentences']:,} sentences)"
            else:
                train_file = args.train_file or base_path / TRAINING_SENTENCES_FILE
                sentences = SentenceCollection(train_file)
                corpus_label = str(train_file)

        model = train_model_cli(kind, sentences, sri_path=args.sri,
                                params=model_params(args, kind),
                                corpus_label=corpus_label)
    except ConfigurationError as e:
        logger.error("%s", e)
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        return 2

    nbest_dir = args.nbest_dir or base_path / SPEECH_NBEST_LISTS_DIR
    if Path(nbest_dir).is_dir():
        nbest_lists = read_nbest_lists(nbest_dir)
        if nbest_lists:
            evaluate_model_cli(model, nbest_lists, acoustic_scale=args.acoustic_scale,
                               verbose=verbose)
        else:
            logger.warning("No N-best lists found in %s", nbest_dir)
    else:
        logger.warning("N-best directory %s not found, skipping evaluation", nbest_dir)

    if args.generate:
        show_generated_sentences(model, args.generate, max_length=args.max_length)

    return 0


if __name__ == '__main__':
    sys.exit(main())
