__version__ = '0.1.0'


def get_versions():
    return {'version': __version__, 'full-revisionid': None, 'dirty': False, 'error': None, 'date': None}
