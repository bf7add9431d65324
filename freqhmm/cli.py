r""" Command line interface: loads a state table and an observation table from delimited text files and prints
the normalized tables, the trellises and one Baum-Welch re-estimation step. """
import argparse
import logging
import sys

from . import config, __version__
from .hmm import build_model, viterbi, forward, backward, reestimate
from .tables import load_frequency_table, normalize, render_table
from .util.exceptions import MalformedTableError, ShapeMismatchError
from .util.log import logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='freqhmm',
        description='Decode and re-estimate a hidden Markov model from a state frequency table and an '
                    'observation frequency table.'
    )
    parser.add_argument('--text', required=True, metavar='STATE_TABLE',
                        help='Delimited file with co-occurrence counts among hidden states.')
    parser.add_argument('--phrase', required=True, metavar='OBSERVATION_TABLE',
                        help='Delimited file with counts of each phrase token per hidden state, in phrase order.')
    parser.add_argument('--delimiter', default=',', help='Cell delimiter of both files (default: %(default)r).')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print debug output.')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _write(out, caption, table):
    out.write(caption + '\n')
    out.write(render_table(table) + '\n\n')


def run(text_path, phrase_path, delimiter=',', out=None):
    r""" Runs all stages on the two files and writes every intermediate table to `out`.

    Parameters
    ----------
    text_path : str or path-like
        State frequency table.
    phrase_path : str or path-like
        Observation frequency table.
    delimiter : str, optional, default=','
        Cell delimiter.
    out : file-like, optional, default=None
        Output stream, defaults to stdout.

    Returns
    -------
    result : Reestimation
        The re-estimation result.
    """
    if out is None:
        out = sys.stdout
    text = load_frequency_table(text_path, delimiter=delimiter)
    _write(out, 'Loaded state table:', text)
    phrase = load_frequency_table(phrase_path, delimiter=delimiter)
    _write(out, 'Loaded observation table:', phrase)

    text_relative = normalize(text)
    _write(out, 'Relative state table:', text_relative)
    phrase_relative = normalize(phrase)
    _write(out, 'Relative observation table:', phrase_relative)

    model = build_model(text_relative, phrase_relative)
    _write(out, 'Viterbi trellis:', viterbi(model))
    alpha = forward(model)
    _write(out, 'Forward trellis:', alpha)
    beta = backward(model)
    _write(out, 'Backward trellis:', beta)

    result = reestimate(model, alpha, beta)
    _write(out, 'Gamma:', result.gamma)
    for t, xi in enumerate(result.xi, start=1):
        _write(out, f'Xi ({t}):', xi)
    _write(out, 'Re-estimated transition table a_ij:', result.transition_prime)
    _write(out, 'Re-estimated emission table b_i:', result.emission_prime)
    return result


def main(argv=None) -> int:
    r""" Entry point of the ``freqhmm`` command.

    Parameters
    ----------
    argv : list of str, optional, default=None
        Arguments, defaults to :code:`sys.argv[1:]`.

    Returns
    -------
    exit_code : int
        0 on success, 1 if the input could not be read or does not form a model.
    """
    args = build_parser().parse_args(argv)
    config.verbose = args.verbose
    log = logger()
    logging.captureWarnings(True)
    logger('py.warnings')
    try:
        run(args.text, args.phrase, delimiter=args.delimiter)
    except (MalformedTableError, ShapeMismatchError) as e:
        log.error("Invalid input: %s", e)
        return 1
    except OSError as e:
        log.error("Could not read input: %s", e)
        return 1
    finally:
        logging.captureWarnings(False)
    return 0
