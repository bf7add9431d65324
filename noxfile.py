import os
import tempfile
from pathlib import Path

import nox

PYTHON_VERSIONS = ["3.8", "3.9", "3.10", "3.11", "3.12", "3.13"]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    pytest_args = []
    session.install("-e", ".[tests]", '-v', silent=False)

    if 'cov' in session.posargs:
        session.log("Running with coverage")
        xml_results_dest = Path(os.getenv('SYSTEM_DEFAULTWORKINGDIRECTORY', tempfile.gettempdir()))
        assert xml_results_dest.exists() and xml_results_dest.is_dir(), 'no dest dir available'
        cover_pkg = 'freqhmm'
        junit_xml = str((xml_results_dest / 'junit.xml').absolute())
        cov_xml = str((xml_results_dest / 'coverage.xml').absolute())

        pytest_args += [f'--cov={cover_pkg}', f"--cov-report=xml:{cov_xml}", f"--junit-xml={junit_xml}"]
    else:
        session.log("Running without coverage")

    test_dirs = [str((Path.cwd() / 'tests').absolute()),  # python tests
                 str((Path.cwd() / 'freqhmm').absolute())]  # doctests
    session.run("python", "-m", "pytest", '-vv', '--doctest-modules', '--durations=20', *pytest_args, *test_dirs)


@nox.session(reuse_venv=True)
def build(session: nox.Session) -> None:
    session.install("build")
    session.log("Building normal files")
    session.run("python", "-m", "build")
