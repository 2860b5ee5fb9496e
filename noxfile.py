"""Nox sessions for the sse-stream test matrix."""

import nox

nox.options.sessions = ["tests", "tests_without_prometheus"]
nox.options.default_venv_backend = "uv"

PYTHONS = ["3.10", "3.11", "3.12", "3.13"]


@nox.session(python=PYTHONS)
def tests(session):
    """Run the suite with every optional extra installed."""
    session.install(".[full,dev]")
    session.run("pytest", "tests/", "-q", "--no-cov", *session.posargs)


@nox.session(python=PYTHONS[-1])
def tests_without_prometheus(session):
    """Run the suite against the bare install (no prometheus-client)."""
    session.install(".[dev]")
    session.run("pytest", "tests/", "-q", "--no-cov", *session.posargs)


@nox.session(python=PYTHONS[-1])
def type_check(session):
    """Run mypy over the package."""
    session.install(".[full,dev]")
    session.run("mypy", "src/sse_stream", *session.posargs)
