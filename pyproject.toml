[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dbshell"
version = "0.1.0"
description = "Building blocks for an interactive SQL shell: statement classification, variables, environment helpers and driver metadata"
requires-python = ">=3.10"
dependencies = []
keywords = ["sql", "shell", "database", "sqlite", "sqlserver", "oracle", "vertica", "metadata"]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dbshell"]

[tool.pytest.ini_options]
addopts = "-ra"
