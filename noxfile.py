import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ["lint", "tests"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "DATABASE_URL",
    "ENVIRONMENT",
    "LOG_LEVEL",
]


def _set_env(session):
    """Propagate database settings into the session; default to test mode."""
    session.env["PYTHONPATH"] = str(Path.cwd())
    session.env.setdefault("ENVIRONMENT", "testing")
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "checkpoint/", "tests/")
    session.run("black", "checkpoint/", "tests/")
    session.run("flake8", "checkpoint/", "tests/")
    session.run("mypy", "checkpoint/")


@nox.session(name="tests")
def tests(session):
    """
    Run the test suite against SQLite.
    Pass positional args to target specific tests.
    Usage:
      nox -s tests
      nox -s tests -- tests/unit/test_services/test_redemption_ledger.py
    """
    _set_env(session)
    session.install("-e", ".[test]")
    targets = session.posargs or ["tests"]
    session.run(
        "pytest",
        *targets,
        "-vv",
        "--tb=short",
        "--cov=checkpoint",
        "--cov-report=term-missing",
        "--cov-fail-under=80",
    )
