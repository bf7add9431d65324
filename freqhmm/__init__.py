import logging

from . import _version
__version__ = _version.get_versions()['version']

from . import config
from . import util
from . import tables
from . import hmm

logging.getLogger(__name__).addHandler(logging.NullHandler())
