[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trishare"
version = "0.1.0"
description = "Building blocks for three-party secure computation (task scheduling, helper-assisted oblivious transfer, boolean and garbled circuits) and plaintext regression training."
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "cryptography",
]
keywords = [
    "secure computation",
    "secret sharing",
    "oblivious transfer",
    "garbled circuits",
    "boolean circuits",
    "regression",
    "gradient descent",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
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
test = [
    "pytest",
]

[project.scripts]
trishare = "trishare.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["trishare"]

[tool.hatch.build.targets.sdist]
include = [
    "trishare",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
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
ignore_missing_imports = true
