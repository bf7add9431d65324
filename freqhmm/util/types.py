from typing import Tuple

import numpy as np
from scipy.sparse import issparse


def ensure_number_array(arr) -> np.ndarray:
    return ensure_array(arr, dtype=np.number)


def ensure_array(arr, dtype=None) -> np.ndarray:
    r""" Converts input to a dense array and checks its dtype.

    Parameters
    ----------
    arr : array_like or sparse matrix
        The input. Scipy sparse matrices are converted to dense arrays.
    dtype : numpy dtype, optional, default=None
        Required abstract dtype, e.g., :code:`np.number`.

    Returns
    -------
    arr : ndarray
        The converted array.

    Raises
    ------
    ValueError
        If the dtype requirement is not met.
    """
    if issparse(arr):
        arr = arr.toarray()
    elif not isinstance(arr, np.ndarray):
        arr = np.asanyarray(arr)
    if dtype is not None and not np.issubdtype(arr.dtype, dtype):
        raise ValueError(f"Array got incompatible dtype: {arr.dtype} is not a subtype of {dtype}.")
    return arr


def ensure_labels(labels, name='labels') -> Tuple[str, ...]:
    r""" Converts an iterable of labels to a tuple of strings.

    Parameters
    ----------
    labels : iterable
        The labels.
    name : str, optional, default='labels'
        Used in error messages.

    Returns
    -------
    labels : tuple of str
    """
    if isinstance(labels, str):
        raise TypeError(f"{name} must be an iterable of strings, not a single string.")
    return tuple(str(label) for label in labels)
