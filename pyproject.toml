[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sumcheck"
version = "0.1.0"
description = "Building blocks for the sumcheck protocol over prime fields: multilinear extensions, virtual polynomials, round evaluations and extrapolation"
requires-python = ">=3.10"
dependencies = []
keywords = ["sumcheck", "multilinear", "interactive-proof", "finite-field", "polynomial"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sumcheck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
