[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bqls"
version = "0.1.0"
description = "Building blocks for a BigQuery SQL language server: protocol types, line-diff edits, table-path completion and a local metadata cache."
requires-python = ">=3.10"
dependencies = []
keywords = ["bigquery", "sql", "language-server", "lsp", "completion", "diff"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bqls"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
