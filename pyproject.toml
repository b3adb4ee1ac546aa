[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pgargs"
version = "0.1.0"
description = "Encode query arguments for the PostgreSQL simple and extended query protocols"
requires-python = ">=3.10"
dependencies = []
keywords = ["postgresql", "postgres", "protocol", "encoding", "parameters", "database"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pgargs"]

[tool.pytest.ini_options]
addopts = "-ra"
