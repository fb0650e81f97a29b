[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "contab"
version = "1.0.0"
description = "Chi-square contingency tables, binary partition search and feature selection for categorical data"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "contingency table",
    "chi-square",
    "feature selection",
    "bonferroni",
    "categorical data",
    "statistics",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
contab = "contab.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["contab"]

[tool.hatch.build.targets.sdist]
include = ["contab", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
