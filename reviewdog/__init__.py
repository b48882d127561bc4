"""Post filtered linter diagnostics as review comments on GitHub, GitLab, Gerrit and Bitbucket."""

__version__ = "0.1.0"