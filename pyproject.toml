[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "reviewdog"
version = "0.1.0"
description = "Report already-filtered linter and compiler diagnostics as code review comments on GitHub, GitLab, Gerrit and Bitbucket."
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = [
    "code review",
    "linter",
    "diagnostics",
    "pull request",
    "merge request",
    "github",
    "gitlab",
    "gerrit",
    "bitbucket",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
reviewdog-trigger-depup = "reviewdog.depup:main"

[tool.hatch.build.targets.wheel]
packages = ["reviewdog"]

[tool.hatch.build.targets.sdist]
include = [
    "reviewdog",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

[tool.coverage.run]
source = ["reviewdog"]
branch = true
