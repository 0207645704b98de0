[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "argen"
version = "0.1.0"
description = "Declaration model, consistency checker and generation helpers for ActiveRecord-style repository packages"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "activerecord",
    "code-generation",
    "repository",
    "octopus",
    "declarations",
]
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
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["argen"]

[tool.hatch.build.targets.sdist]
include = ["argen", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
