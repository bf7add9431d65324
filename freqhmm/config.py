r""" Runtime settings of freqhmm. Values are module-level and read at call time, so they can be changed by
assigning to the module attribute, e.g., :code:`freqhmm.config.verbose = True`. """
import logging

import numpy as np

# data type for floating-point tables and trellises
dtype = np.float64

# number of decimals each Viterbi candidate is rounded to before the maximum is taken
viterbi_decimals = 10

# header label of the trailing row-sum column of frequency tables
sum_label = 'sum'

# header label of the synthetic first trellis column
start_label = 'start'

# how undefined cells are printed
undefined_marker = '-'

# format string for printing floating point cells, only used for rendering
float_format = '.10g'

# print a lot of info?
verbose = False


def log_level():
    if verbose:
        return logging.DEBUG
    else:
        return logging.INFO
