"""Trigger the depup workflow in every action repository of an organisation."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import requests

from reviewdog.github_client import GitHubClient

TOKEN_ENV = "DEPUP_GITHUB_API_TOKEN"
DEFAULT_ORG = "reviewdog"
ACTION_PREFIX = "action-"
EVENT_TYPE = "depup"

logger = logging.getLogger(__name__)


def run(client: GitHubClient, org: str = DEFAULT_ORG) -> None:
    """Dispatch ``depup`` to each ``action-`` repository of ``org``.

    Every repository is tried; the last dispatch failure is raised at the end.
    """
    repos = client.list_org_repos(org, per_page=100)
    last_error: requests.RequestException | None = None
    for repo in repos:
        name = repo.get("name") or ""
        if not name.startswith(ACTION_PREFIX):
            continue
        logger.info("Dispatch depup to %s/%s...", org, name)
        try:
            client.dispatch(org, name, EVENT_TYPE)
        except requests.RequestException as exc:
            logger.info("Dispatch depup to %s/%s failed: %s", org, name, exc)
            last_error = exc
    if last_error is not None:
        raise last_error


def main(argv: list[str] | None = None) -> int:
    """Command entry point; returns the exit status."""
    parser = argparse.ArgumentParser(
        prog="trigger-depup",
        description="Dispatch the depup event to action repositories.",
    )
    parser.add_argument("-org", "--org", default=DEFAULT_ORG, help="target org name")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    token = os.environ.get(TOKEN_ENV, "")
    if not token:
        print(f"{TOKEN_ENV} is empty", file=sys.stderr)
        return 1
    try:
        run(GitHubClient(token=token), args.org)
    except requests.RequestException as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())