#
# Copyright 2026 dtedpy developers
#
# Licensed under MIT License.
#

import nox

_PYTHON_VERSIONS = ['3.8', '3.11']
_LOCATIONS = ["tests"]


# Run only test session when no arguments are specified
nox.options.sessions = ["test"]


@nox.session(python=_PYTHON_VERSIONS)
def test(session):
    args = session.posargs or _LOCATIONS
    session.install('.[tests]')
    session.run("pytest", *args)
