import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# psycopg2-binary ships a compiled extension; a cached wheel may target another interpreter.
_C_EXT_PACKAGES = ["psycopg2-binary"]

# Test layers, selected by the markers tests/conftest.py applies per directory
_LAYERS = ["domain", "application", "integration", "bdd"]


def _install(session: nox.Session) -> None:
    """Install the marketplace package and its test extra."""
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run every test layer."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize("layer", _LAYERS)
def test_layer(session: nox.Session, layer: str) -> None:
    """Run one test layer, e.g. ``nox -s "test_layer(layer='domain')"``."""
    _install(session)
    session.run("pytest", "-m", layer, *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_postgres(session: nox.Session) -> None:
    """Run the command and API layers against PostgreSQL (needs a running server)."""
    _install(session)
    session.run("python", "src/manage.py", "setup-db", env={"PROTEAN_ENV": "production"})
    try:
        session.run("pytest", "--env", "production", "-m", "application or integration", *session.posargs)
    finally:
        session.run("python", "src/manage.py", "drop-db", env={"PROTEAN_ENV": "production"})
