[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "treecode"
version = "0.1.0"
description = "Tree nodes with multipole moments, boundary conditions, a leapfrog pusher and particle I/O for charged-particle simulations"
requires-python = ">=3.10"
keywords = ["barnes-hut", "treecode", "n-body", "plasma", "multipole", "leapfrog"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["treecode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
