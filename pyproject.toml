[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dbmscore"
version = "0.1.0"
description = "Storage core of a small table database: typed values, record files, sorted merging, message framing and a query client."
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "storage", "datafile", "types", "merge", "client"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dbmscore-client = "dbmscore.client:main"

[tool.hatch.build.targets.wheel]
packages = ["dbmscore"]

[tool.hatch.build.targets.sdist]
include = ["dbmscore", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
